from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from starlette.concurrency import run_in_threadpool

from app.core.errors import SubmissionError, UnexpectedError
from app.services.submissions import SubmissionProcessor

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submissions"])

# Both paths the test frontends have been deployed against.
SUBMISSION_PATHS = ("/submit", "/save-result")


async def submit(request: Request):
    body = await request.body()
    try:
        ack = await run_in_threadpool(SubmissionProcessor().handle, body)
    except SubmissionError:
        raise
    except Exception as e:
        log.exception("error processing test submission")
        raise UnexpectedError("Internal server error", details=str(e)) from e
    return ack.model_dump(by_alias=True, exclude_none=True)


def preflight() -> Response:
    return Response(status_code=200)


for _path in SUBMISSION_PATHS:
    router.add_api_route(_path, submit, methods=["POST"])
    router.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)
