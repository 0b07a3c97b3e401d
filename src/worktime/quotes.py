"""Motivational quotes shown when a day starts."""

from __future__ import annotations

import random
from typing import Optional

WORK_QUOTES: tuple[str, ...] = (
    "I love deadlines. I like the whooshing sound they make as they fly by.",
    "Teamwork is important; it gives you someone else to blame.",
    "My job is solving problems I would not have without my job.",
    "The best way to appreciate your job is to imagine yourself without one.",
    "I'm not lazy. I'm in energy-saving mode.",
    "Mondays would be easier if they started on Tuesday.",
    "Coffee, because life is too short for a bad mood.",
    "I spend 8 hours a day at work and cannot tell you what I did.",
    "The light at the end of the tunnel is just an oncoming train.",
    "My favourite thing to do at work is going home.",
    "I only get up for three things: coffee, lunch and the end of the day.",
    "I'm productive, my boss just doesn't know it yet.",
    "I work hard so my dog can have a better life.",
    "A job is a job, a boss is a boss, but the weekend is the weekend.",
    "Life is too short for a boring office.",
    "Most of my best ideas arrive when I should be working.",
    "Every day is a fight between wanting to be productive and wanting a nap.",
)


def pick_quote(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(WORK_QUOTES)
