from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.schemas.submission import ScoreSummary, Submission, SubmittedQuestion
from app.services.scoring import Outcome, SubmissionMethod, format_duration, question_outcome

SEPARATOR = "────────────────────"
NOT_ANSWERED = "Not answered"

_OUTCOME_MARKERS = {
    Outcome.correct: "✅",
    Outcome.wrong: "❌",
    Outcome.unanswered: "⏭️",
}

_MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")


def escape_markdown(text: str) -> str:
    """Escape Telegram legacy Markdown entities in user-supplied text."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", str(text or ""))


def _report_tz() -> tzinfo:
    name = (settings.report_timezone or "").strip()
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(_report_tz()).strftime("%Y-%m-%d %H:%M:%S %Z")


def _option_text(q: SubmittedQuestion, idx: int | None) -> str:
    if idx is None:
        return "(not set)"
    if not 0 <= idx < len(q.options):
        return f"(no option #{idx})"
    return escape_markdown(q.options[idx])


def _render_question(n: int, q: SubmittedQuestion) -> list[str]:
    outcome = question_outcome(q)
    answer = NOT_ANSWERED if outcome is Outcome.unanswered else _option_text(q, q.selected)

    lines = [
        f"{_OUTCOME_MARKERS[outcome]} *Q{n}:* {escape_markdown(q.question)}",
        f"   Student's answer: {answer}",
    ]
    if outcome is not Outcome.correct:
        lines.append(f"   Correct answer: {_option_text(q, q.correct)}")
    return lines


def render_report(
    submission: Submission,
    summary: ScoreSummary,
    method: SubmissionMethod,
    *,
    submitted_at: datetime | None = None,
) -> str:
    submitted_at = submitted_at or datetime.now(timezone.utc)

    lines = [
        f"📝 *{escape_markdown(settings.report_title)}*",
        "",
        f"👤 *Student:* {escape_markdown(submission.student_name)}",
        f"⏱️ *Time Spent:* {format_duration(submission.time_spent)}",
        f"⏰ *Time Left:* {format_duration(submission.time_left)}",
        f"📊 *Score:* {summary.correct}/{summary.total} ({summary.percentage}%)",
        f"❓ *Unanswered:* {summary.unanswered}",
        f"🚪 *Page Leaves:* {submission.leave_count}",
    ]
    if submission.start_time is not None:
        lines.append(f"📅 *Test Date:* {_format_timestamp(submission.start_time)}")
    lines += [
        f"🕒 *Submitted:* {_format_timestamp(submitted_at)}",
        f"🎯 *Submission:* {method.label}",
        "",
        "*DETAILED RESULTS:*",
        SEPARATOR,
    ]

    for n, q in enumerate(submission.questions, start=1):
        lines.append("")
        lines += _render_question(n, q)

    lines += [
        "",
        SEPARATOR,
        "*SUMMARY*",
        f"✅ Correct: {summary.correct}",
        f"❌ Wrong: {summary.wrong}",
        f"⏭️ Unanswered: {summary.unanswered}",
        f"🏆 Final Score: {summary.percentage}%",
    ]
    return "\n".join(lines) + "\n"
