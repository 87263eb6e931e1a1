"""JupiterOne deferred query client for j1-tool.

Submits J1QL through the QueryLanguageV1 GraphQL operation with
``deferredResponse: FORCE``, then polls the returned result URL until
the job completes, fails, or the query timeout elapses. Errors are
mapped onto the J1ToolError hierarchy; the access token is redacted
from every diagnostic message.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import sentry_sdk

from j1_tool.core.exceptions import (
    CredentialError,
    ProtocolError,
    QueryError,
    TimeoutError,
    TransportError,
    redact,
)
from j1_tool.core.logging import get_logger
from j1_tool.core.models import DeferredJob, JobResult, JobStatus
from j1_tool.core.transport import HttpxTransport, Transport

if TYPE_CHECKING:
    from j1_tool.core.config import ResolvedConfig
    from j1_tool.core.models import QuerySpec

QUERY_V1 = """query QueryLanguageV1(
  $query: String!
  $variables: JSON
  $includeDeleted: Boolean
  $deferredResponse: DeferredResponseOption
  $deferredFormat: DeferredResponseFormat
  $cursor: String
  $flags: QueryV1Flags
) {
  queryV1(
    query: $query
    variables: $variables
    includeDeleted: $includeDeleted
    deferredResponse: $deferredResponse
    deferredFormat: $deferredFormat
    cursor: $cursor
    flags: $flags
  ) {
    type
    data
    url
  }
}"""

TEST_QUERY = "query TestQuery { __typename }"


def build_query_payload(query: str, cursor: str | None = None) -> dict[str, Any]:
    return {
        "query": QUERY_V1,
        "variables": {
            "query": query,
            "deferredResponse": "FORCE",
            "flags": {"variableResultSize": True},
            "cursor": cursor,
        },
    }


def _dump(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def parse_deferred_response(body: Any, query: str) -> str:
    """Extract the deferred result URL from a queryV1 response body.

    Pure function of the body. Raises QueryError for GraphQL errors and
    ProtocolError when no result location is present.
    """
    if isinstance(body, dict) and body.get("errors"):
        detail = _dump(body["errors"])
        raise QueryError(
            f"JupiterOne returned error(s) for query: '{query}': {detail}",
            query=query,
            detail=detail,
        )

    url = None
    if isinstance(body, dict):
        query_v1 = (body.get("data") or {}).get("queryV1") or {}
        if isinstance(query_v1, dict):
            url = query_v1.get("url")

    if not url or not isinstance(url, str):
        raise ProtocolError(
            f"JupiterOne returned no deferred result location. Response: {_dump(body)}",
            response=body,
        )
    return url


def parse_job_status(body: Any) -> JobResult:
    """Interpret one poll response body as a JobResult snapshot.

    Unknown status values are passed through; callers treat anything
    other than COMPLETED or FAILED as still in progress.
    """
    if not isinstance(body, dict):
        raise ProtocolError(
            f"Unexpected deferred result response: {_dump(body)}", response=body
        )

    status = str(body.get("status") or JobStatus.IN_PROGRESS)
    rows = body.get("data")
    if rows is None:
        rows = []
    elif not isinstance(rows, list):
        if status == JobStatus.COMPLETED:
            raise ProtocolError(
                f"Deferred result data is not a list: {_dump(rows)}", response=body
            )
        rows = []

    cursor = body.get("cursor") or None
    if cursor is not None and not isinstance(cursor, str):
        raise ProtocolError(
            f"Deferred result cursor is not a string: {_dump(cursor)}", response=body
        )
    error = body.get("error")
    return JobResult(
        status=status,
        rows=rows,
        cursor=cursor,
        error=_dump(error) if error is not None else None,
    )


class J1Client:
    """Synchronous JupiterOne deferred query client."""

    def __init__(
        self,
        config: ResolvedConfig,
        transport: Transport | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._transport = transport or HttpxTransport(timeout=config.http_timeout)
        self._sleep = sleep
        self._clock = clock

    def __enter__(self) -> J1Client:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._transport.close()

    def _headers(self) -> dict[str, str]:
        account_id = self.config.account_id
        token = self.config.token
        if not account_id or not token:
            missing = [
                name
                for name, value in (("account id", account_id), ("API token", token))
                if not value
            ]
            msg = (
                f"Missing required JupiterOne credentials: {', '.join(missing)}. "
                "Set them in a profile, the environment, or on the command line."
            )
            raise CredentialError(msg)
        return {
            "Authorization": f"Bearer {token}",
            "JupiterOne-Account": account_id,
            "Content-Type": "application/json",
        }

    def _redact(self, text: str) -> str:
        return redact(text, self.config.token)

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> Any:
        try:
            status_code, payload = self._transport.send(method, url, headers, body)
        except TransportError as e:
            raise TransportError(
                self._redact(e.message), status_code=e.status_code, body=e.body
            ) from e

        if not 200 <= status_code < 300:
            raw = self._redact(_dump(payload))
            msg = f"{method} {url} returned HTTP {status_code}: {raw}"
            raise TransportError(self._redact(msg), status_code=status_code, body=raw)
        return payload

    def submit(self, spec: QuerySpec, cursor: str | None = None) -> DeferredJob:
        """Submit a query for deferred execution and return the job handle."""
        log = get_logger("client")
        headers = self._headers()
        url = self.config.graphql_url

        log.debug("submitting query", query=spec.text, cursor=cursor, url=url)
        with sentry_sdk.start_span(op="j1.submit", description=spec.text[:100]) as span:
            payload = build_query_payload(spec.text, cursor)
            body = self._send("POST", url, headers, payload)
            try:
                result_url = parse_deferred_response(body, spec.text)
            except QueryError as e:
                span.set_status("invalid_argument")
                detail = self._redact(e.detail or "")
                log.error("query rejected", query=spec.text, errors=detail)
                raise QueryError(
                    self._redact(e.message), query=spec.text, detail=detail
                ) from e
            except ProtocolError as e:
                span.set_status("internal_error")
                raise ProtocolError(self._redact(e.message), response=e.response) from e

        log.debug("query deferred", result_url=result_url)
        return DeferredJob(result_url=result_url, submitted_at=self._clock())

    def poll(self, job: DeferredJob) -> JobResult:
        """Poll the deferred result URL until the job leaves IN_PROGRESS."""
        log = get_logger("client")
        headers = self._headers()
        timeout = self.config.query_timeout
        attempts = 0
        warned_statuses: set[str] = set()

        with sentry_sdk.start_span(
            op="j1.poll", description=job.result_url[:100]
        ) as span:
            while True:
                self._sleep(self.config.poll_interval)
                elapsed = self._clock() - job.submitted_at
                if elapsed > timeout:
                    span.set_status("deadline_exceeded")
                    log.error("poll timeout", attempts=attempts, timeout=timeout)
                    raise TimeoutError(
                        f"Exceeded request timeout of {timeout:g} seconds.",
                        timeout=timeout,
                    )

                attempts += 1
                body = self._send("GET", job.result_url, headers)
                try:
                    result = parse_job_status(body)
                except ProtocolError as e:
                    span.set_status("internal_error")
                    raise ProtocolError(
                        self._redact(e.message), response=e.response
                    ) from e
                log.debug("poll status", status=str(result.status), attempt=attempts)

                if result.status == JobStatus.FAILED:
                    span.set_status("internal_error")
                    detail = self._redact(result.error or "unknown error")
                    raise QueryError(
                        f"JupiterOne returned error(s) for query: '{detail}'",
                        detail=detail,
                    )
                if result.status == JobStatus.COMPLETED:
                    span.set_data("row_count", len(result.rows))
                    span.set_data("attempts", attempts)
                    return result
                status = str(result.status)
                if status != JobStatus.IN_PROGRESS and status not in warned_statuses:
                    warned_statuses.add(status)
                    log.warning("unknown job status, still waiting", status=status)

    def check_credentials(self) -> bool:
        """Run a trivial GraphQL query to confirm the credentials work."""
        log = get_logger("client")
        headers = self._headers()
        try:
            body = self._send(
                "POST",
                self.config.graphql_url,
                headers,
                {"query": TEST_QUERY, "variables": {}},
            )
        except TransportError as e:
            if e.status_code in (401, 403):
                msg = f"JupiterOne rejected the credentials (HTTP {e.status_code})"
                raise CredentialError(msg) from e
            raise

        if isinstance(body, dict) and body.get("errors"):
            detail = self._redact(_dump(body["errors"]))
            raise QueryError(f"Credential check failed: {detail}", detail=detail)
        log.debug("credentials verified", account_id=self.config.account_id)
        return True
