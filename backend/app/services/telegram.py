from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import settings
from app.core.errors import NotificationDeliveryError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    delivered: bool
    error: str | None = None
    chunks: int = 0


def split_message(text: str, limit: int) -> list[str]:
    """Cut ``text`` into ordered pieces of at most ``limit`` characters.

    Cuts fall right after the last newline inside the window when there is one,
    so Markdown entities on a single line stay intact. Joining the pieces gives
    back the original text.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    parts: list[str] = []
    rest = text
    while len(rest) > limit:
        nl = rest.rfind("\n", 0, limit)
        cut = nl + 1 if nl > 0 else limit
        parts.append(rest[:cut])
        rest = rest[cut:]
    if rest or not parts:
        parts.append(rest)
    return parts


def _api_url(method: str) -> str:
    base = str(settings.telegram_api_base_url or "").rstrip("/")
    token = str(settings.telegram_bot_token or "").strip()
    return f"{base}/bot{token}/{method}"


def _send_one(client: httpx.Client, *, text: str) -> dict[str, Any]:
    payload = {
        "chat_id": str(settings.telegram_chat_id or "").strip(),
        "text": text,
        "parse_mode": "Markdown",
        "disable_web_page_preview": True,
    }
    try:
        r = client.post(_api_url("sendMessage"), json=payload)
    except httpx.HTTPError as e:
        # The exception text may carry the request URL, which embeds the token.
        raise NotificationDeliveryError(f"Telegram request failed: {type(e).__name__}") from e

    try:
        data = r.json()
    except ValueError as e:
        raise NotificationDeliveryError(f"Telegram API error: http_{r.status_code}") from e

    if not isinstance(data, dict) or not data.get("ok"):
        description = data.get("description") if isinstance(data, dict) else None
        raise NotificationDeliveryError(f"Telegram API error: {description or 'Unknown Telegram error'}")
    return data


def send_report(report: str) -> NotificationResult:
    if not settings.telegram_enabled:
        log.info("telegram not configured: missing TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID")
        return NotificationResult(delivered=False)

    chunks = split_message(report, int(settings.telegram_max_message_length))
    delay = max(0.0, float(settings.telegram_chunk_delay_seconds))

    sent = 0
    try:
        timeout = httpx.Timeout(float(settings.telegram_timeout_seconds))
        with httpx.Client(timeout=timeout) as client:
            for i, chunk in enumerate(chunks):
                if i and delay:
                    time.sleep(delay)
                _send_one(client, text=chunk)
                sent += 1
    except NotificationDeliveryError as e:
        log.warning("telegram delivery failed after %s/%s chunk(s): %s", sent, len(chunks), e)
        return NotificationResult(delivered=False, error=str(e), chunks=sent)

    log.info("telegram notification sent in %s chunk(s)", sent)
    return NotificationResult(delivered=True, chunks=sent)


def telegram_healthcheck() -> tuple[bool, str | None]:
    if not settings.telegram_enabled:
        return False, "not_configured"

    try:
        timeout = httpx.Timeout(connect=2.0, read=2.5, write=2.0, pool=2.0)
        with httpx.Client(timeout=timeout) as client:
            r = client.get(_api_url("getMe"))
            if r.status_code >= 400:
                return False, f"http_{r.status_code}"
            data = r.json()
        if not isinstance(data, dict) or not data.get("ok"):
            return False, "api_error"
        return True, None
    except Exception as e:
        return False, f"unreachable:{type(e).__name__}"
