from __future__ import annotations

import enum
from collections.abc import Iterable

from app.schemas.submission import ScoreSummary, SubmittedQuestion

MAX_PAGE_LEAVES = 3


class SubmissionMethod(str, enum.Enum):
    manual = "manual"
    time_expired = "time_expired"
    too_many_leaves = "too_many_leaves"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS = {
    SubmissionMethod.manual: "Manual Submission",
    SubmissionMethod.time_expired: "Time's Up (Auto-submitted)",
    SubmissionMethod.too_many_leaves: "Too Many Page Leaves (Auto-submitted)",
}


class Outcome(str, enum.Enum):
    correct = "correct"
    wrong = "wrong"
    unanswered = "unanswered"


def question_outcome(q: SubmittedQuestion) -> Outcome:
    if q.selected is None:
        return Outcome.unanswered
    if q.selected == q.correct:
        return Outcome.correct
    return Outcome.wrong


def _percent_half_up(part: int, total: int) -> int:
    if total <= 0:
        return 0
    # Integer form of floor(100 * part / total + 0.5).
    return (200 * part + total) // (2 * total)


def score_questions(questions: Iterable[SubmittedQuestion]) -> ScoreSummary:
    counts = {o: 0 for o in Outcome}
    for q in questions:
        counts[question_outcome(q)] += 1

    total = sum(counts.values())
    correct = counts[Outcome.correct]
    return ScoreSummary(
        total=total,
        correct=correct,
        wrong=counts[Outcome.wrong],
        unanswered=counts[Outcome.unanswered],
        percentage=_percent_half_up(correct, total),
    )


def format_duration(seconds: int | None) -> str:
    s = max(0, int(seconds or 0))
    return f"{s // 60}m {s % 60}s"


def classify_submission_method(time_left: int | None, leave_count: int | None) -> SubmissionMethod:
    if int(time_left or 0) <= 0:
        return SubmissionMethod.time_expired
    if int(leave_count or 0) > MAX_PAGE_LEAVES:
        return SubmissionMethod.too_many_leaves
    return SubmissionMethod.manual
