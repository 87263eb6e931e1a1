"""JupiterOne alert webhook validation and normalization.

Stateless: each request is checked against the optional shared-secret
header and its payload is reshaped into an alert record.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, SecretStr

from j1_tool.core.logging import get_logger
from j1_tool.core.models import WebhookResponse

DEFAULT_HEADER_NAME = "X-JupiterOne-Signature"

_EXTRACTED_FIELDS = (
    "ruleName",
    "severity",
    "triggeredAt",
    "queryData",
    "queryResults",
    "data",
)


class WebhookSettings(BaseModel):
    authentication: Literal["none", "header"] = "none"
    secret: SecretStr | None = None
    header_name: str = DEFAULT_HEADER_NAME


def _reject(status_code: int, error: str) -> WebhookResponse:
    return WebhookResponse(status_code=status_code, body={"error": error})


def _header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def normalize_alert(
    body: Mapping[str, Any], now: datetime | None = None
) -> dict[str, Any]:
    """Reshape a webhook payload into the alert record passed downstream."""
    stamp = (now or datetime.now(UTC)).isoformat()
    alert: dict[str, Any] = {
        "ruleName": body.get("ruleName") or "Unknown Rule",
        "severity": body.get("severity") or "UNKNOWN",
        "triggeredAt": body.get("triggeredAt") or stamp,
        "timestamp": stamp,
    }

    if body.get("queryData"):
        alert["queryData"] = body["queryData"]

    query_results = body.get("queryResults")
    if query_results:
        alert["queryResults"] = query_results
        total = None
        if isinstance(query_results, Mapping):
            total = query_results.get("total")
        alert["totalResults"] = total or 0

    data = body.get("data")
    if isinstance(data, list):
        alert["entities"] = data
        alert["totalEntities"] = len(data)

    alert.update({k: v for k, v in body.items() if k not in _EXTRACTED_FIELDS})
    return alert


def handle_webhook(
    body: Any,
    headers: Mapping[str, str],
    settings: WebhookSettings | None = None,
) -> WebhookResponse:
    """Authenticate and normalize one incoming webhook request.

    Returns 401 on a missing or wrong secret header, 400 when the
    payload is not a JSON object, 200 with the alert otherwise.
    """
    log = get_logger("webhook")
    settings = settings or WebhookSettings()

    if settings.authentication == "header":
        received = _header(headers, settings.header_name)
        if not received:
            log.error(
                "missing webhook authentication header",
                header=settings.header_name,
            )
            return _reject(401, "Missing authentication header")

        expected = settings.secret.get_secret_value() if settings.secret else ""
        if not hmac.compare_digest(received.encode(), expected.encode()):
            log.error("invalid webhook authentication token")
            return _reject(401, "Invalid authentication token")

    if not isinstance(body, Mapping):
        log.error("invalid webhook payload: not an object")
        return _reject(400, "Invalid webhook payload")

    alert = normalize_alert(body)
    log.debug("webhook accepted", rule=alert["ruleName"], severity=alert["severity"])
    return WebhookResponse(status_code=200, body={"status": "ok"}, alert=alert)
