"""Statutory break rules evaluated against the accumulated day totals."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

MINUTE = 60.0
HOUR = 3600.0

BREAK_DUE_AFTER = 6 * HOUR
LONG_BREAK_DUE_AFTER = 9 * HOUR


@dataclass(frozen=True, slots=True)
class BreakRule:
    rule_id: str
    min_work_minutes: int
    title: str
    body: str
    # Rule is satisfied (and stays quiet) once this much pause was taken.
    pause_quota_minutes: Optional[int] = None

    def applies(self, work_seconds: float, pause_seconds: float) -> bool:
        if work_seconds < self.min_work_minutes * MINUTE:
            return False
        if self.pause_quota_minutes is None:
            return True
        return pause_seconds < self.pause_quota_minutes * MINUTE


RULES: tuple[BreakRule, ...] = (
    BreakRule(
        rule_id="break_30",
        min_work_minutes=345,
        pause_quota_minutes=30,
        title="Break due (30 min)!",
        body="After 6 hours of work a 30-minute break is required by law.",
    ),
    BreakRule(
        rule_id="break_45",
        min_work_minutes=525,
        pause_quota_minutes=45,
        title="Break due (45 min)!",
        body="After 9 hours of work a 45-minute break is required by law.",
    ),
    BreakRule(
        rule_id="max_work",
        min_work_minutes=600,
        title="Maximum working time reached!",
        body="The statutory maximum working time of 10 hours has been reached.",
    ),
)


@dataclass(frozen=True, slots=True)
class BreakRuleLatches:
    """One-shot flags for the current day; field names match rule ids."""

    break_30: bool = False
    break_45: bool = False
    max_work: bool = False

    def is_set(self, rule_id: str) -> bool:
        return bool(getattr(self, rule_id))

    def latch(self, rule_id: str) -> "BreakRuleLatches":
        return replace(self, **{rule_id: True})


@dataclass(frozen=True, slots=True)
class BreakEvent:
    rule_id: str
    title: str
    body: str


def evaluate(
    work_seconds: float,
    pause_seconds: float,
    latches: BreakRuleLatches,
    rules: tuple[BreakRule, ...] = RULES,
) -> tuple[list[BreakEvent], BreakRuleLatches]:
    """Return the rules crossed since the last call and the updated latches.

    Every rule is checked independently, so several can fire on one call.
    A rule whose latch is already set never fires again.
    """
    events: list[BreakEvent] = []
    for rule in rules:
        if latches.is_set(rule.rule_id):
            continue
        if rule.applies(work_seconds, pause_seconds):
            latches = latches.latch(rule.rule_id)
            events.append(BreakEvent(rule.rule_id, rule.title, rule.body))
    return events, latches


def remaining_work_until_break(work_seconds: float) -> float:
    return max(0.0, BREAK_DUE_AFTER - work_seconds)


def required_break_seconds(work_seconds: float) -> float:
    if work_seconds >= LONG_BREAK_DUE_AFTER:
        return 45 * MINUTE
    if work_seconds >= BREAK_DUE_AFTER:
        return 30 * MINUTE
    return 0.0
