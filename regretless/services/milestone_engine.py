"""
Milestone Engine — one-time achievements earned when a counter crosses a
fixed threshold.

Rules
-----
  counter         threshold   title                 points
  event_count         5       Track 5 Sessions         50
  event_count        20       Track 20 Sessions       100
  streak_days         3       3-Day Streak             75
  streak_days         7       Weekly Streak           150
  point_balance     100       Century Club             50
  point_balance     500       High Achiever           100
  comment_count       5       Supportive Friend        75
  like_count         10       Community Supporter      50

Idempotency
-----------
The title is the uniqueness key. A rule fires only when its predicate holds
AND its title is not already earned, so re-running with the earned set
updated yields nothing. Rules are independent; several may fire at once.

Pure: no I/O, inputs are never mutated.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Collection, Optional

from regretless.services.domain import Milestone, ProgressCounters, utcnow


# ---------------------------------------------------------------------------
# Counter names (attributes of ProgressCounters)
# ---------------------------------------------------------------------------

class Counter:
    EVENT_COUNT   = "event_count"
    STREAK_DAYS   = "streak_days"
    POINT_BALANCE = "point_balance"
    COMMENT_COUNT = "comment_count"
    LIKE_COUNT    = "like_count"


@dataclass(frozen=True)
class MilestoneRule:
    title: str
    description: str
    counter: str
    threshold: int
    points: int
    icon_name: str

    def current(self, counters: ProgressCounters) -> int:
        return getattr(counters, self.counter)

    def is_met(self, counters: ProgressCounters) -> bool:
        return self.current(counters) >= self.threshold

    def to_milestone(self, achieved_at: datetime) -> Milestone:
        return Milestone(
            title=self.title,
            description=self.description,
            points_awarded=self.points,
            date_achieved=achieved_at,
            icon_name=self.icon_name,
        )


MILESTONE_RULES: tuple[MilestoneRule, ...] = (
    MilestoneRule(
        "Track 5 Sessions", "Log 5 vaping sessions in the tracking tool",
        Counter.EVENT_COUNT, 5, 50, "doc.text.magnifyingglass",
    ),
    MilestoneRule(
        "Track 20 Sessions", "Log 20 vaping sessions in the tracking tool",
        Counter.EVENT_COUNT, 20, 100, "doc.text.magnifyingglass",
    ),
    MilestoneRule(
        "3-Day Streak", "Use the app for 3 days in a row",
        Counter.STREAK_DAYS, 3, 75, "calendar.badge.clock",
    ),
    MilestoneRule(
        "Weekly Streak", "Complete 7 consecutive days of app use",
        Counter.STREAK_DAYS, 7, 150, "calendar",
    ),
    MilestoneRule(
        "Century Club", "Earn 100 points in the app",
        Counter.POINT_BALANCE, 100, 50, "star.circle.fill",
    ),
    MilestoneRule(
        "High Achiever", "Earn 500 points in the app",
        Counter.POINT_BALANCE, 500, 100, "star.circle.fill",
    ),
    MilestoneRule(
        "Supportive Friend", "Comment on 5 peer stories",
        Counter.COMMENT_COUNT, 5, 75, "bubble.left.fill",
    ),
    MilestoneRule(
        "Community Supporter", "Like 10 peer stories or comments",
        Counter.LIKE_COUNT, 10, 50, "hand.thumbsup.fill",
    ),
)


# ---------------------------------------------------------------------------
# Public — main entry point
# ---------------------------------------------------------------------------

def evaluate(
    counters: ProgressCounters,
    already_earned_titles: Collection[str],
    now: Optional[datetime] = None,
    rules: tuple[MilestoneRule, ...] = MILESTONE_RULES,
) -> list[Milestone]:
    """Return the milestones newly earned by `counters`, in rule-table order."""
    achieved_at = now or utcnow()
    return [
        rule.to_milestone(achieved_at)
        for rule in rules
        if rule.title not in already_earned_titles and rule.is_met(counters)
    ]


# ---------------------------------------------------------------------------
# Public — progress view
# ---------------------------------------------------------------------------

@dataclass
class MilestoneProgress:
    rule: MilestoneRule
    current: int       # capped at target
    target: int
    earned: bool


def milestone_progress(
    counters: ProgressCounters,
    already_earned_titles: Collection[str],
    rules: tuple[MilestoneRule, ...] = MILESTONE_RULES,
) -> list[MilestoneProgress]:
    return [
        MilestoneProgress(
            rule=rule,
            current=min(max(rule.current(counters), 0), rule.threshold),
            target=rule.threshold,
            earned=rule.title in already_earned_titles,
        )
        for rule in rules
    ]
