from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import MalformedInputError, ValidationError
from app.schemas.submission import ScoreSummary, Submission, SubmissionAck
from app.services.report import render_report
from app.services.scoring import classify_submission_method, format_duration, score_questions
from app.services.telegram import NotificationResult, send_report

log = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Missing required fields: studentName and questions are required"


def _describe_errors(exc: PydanticValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return out


def parse_submission(body: bytes | str | dict[str, Any]) -> Submission:
    data: Any = body
    if isinstance(body, (bytes, bytearray, str)):
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MalformedInputError("Invalid JSON data") from e
    if not isinstance(data, dict):
        raise MalformedInputError("Invalid JSON data")

    name = data.get("studentName")
    questions = data.get("questions")
    # An empty list is a valid (if pointless) test; other falsy values are not.
    if not str(name or "").strip() or questions is None or (not questions and not isinstance(questions, list)):
        raise ValidationError(MISSING_FIELDS_ERROR)

    try:
        return Submission.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid submission data", details=_describe_errors(e)) from e


def build_response(
    student_name: str,
    summary: ScoreSummary,
    delivered: bool,
    error: str | None = None,
) -> SubmissionAck:
    return SubmissionAck(
        student_name=student_name,
        score=f"{summary.correct}/{summary.total}",
        percentage=summary.percentage,
        telegram_sent=bool(delivered),
        telegram_error=None if delivered else error,
    )


class SubmissionProcessor:
    def __init__(
        self,
        *,
        notify: Callable[[str], NotificationResult] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.notify = notify if notify is not None else send_report
        self.clock = clock if clock is not None else (lambda: datetime.now(timezone.utc))

    def handle(self, body: bytes | str | dict[str, Any]) -> SubmissionAck:
        submission = parse_submission(body)

        summary = score_questions(submission.questions)
        method = classify_submission_method(submission.time_left, submission.leave_count)
        report = render_report(submission, summary, method, submitted_at=self.clock())

        result = self.notify(report)

        log.info(
            "test submission received: student=%r score=%s/%s (%s%%) unanswered=%s "
            "time_spent=%s time_left=%s leaves=%s method=%s telegram_sent=%s",
            submission.student_name,
            summary.correct,
            summary.total,
            summary.percentage,
            summary.unanswered,
            format_duration(submission.time_spent),
            format_duration(submission.time_left),
            submission.leave_count,
            method.value,
            result.delivered,
        )
        if result.error:
            log.warning("telegram error for %r: %s", submission.student_name, result.error)

        return build_response(submission.student_name, summary, result.delivered, result.error)
