"""Cursor-driven pagination and result assembly.

One query runs as a strictly sequential chain of submit/poll cycles.
Each completed job hands back a cursor for the next page; paging stops
when the cursor runs out, a page comes back empty, or the cap is met.
Rows keep server order and are never deduplicated.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import sentry_sdk

from j1_tool.core.exceptions import J1ToolError
from j1_tool.core.logging import get_logger
from j1_tool.core.models import Accumulator, FailureRecord, ResultEnvelope
from j1_tool.core.normalizer import normalize_query

if TYPE_CHECKING:
    from j1_tool.core.client import J1Client
    from j1_tool.core.models import QuerySpec


def paginate(client: J1Client, spec: QuerySpec) -> Accumulator:
    """Collect rows for spec across as many deferred jobs as needed.

    Submission and polling errors propagate immediately; rows from
    earlier pages are discarded with the failed invocation.
    """
    log = get_logger("pager")
    acc = Accumulator(cap=spec.cap)

    while True:
        job = client.submit(spec, cursor=acc.cursor)
        page = client.poll(job)
        acc.pages += 1
        acc.rows.extend(page.rows)
        acc.cursor = page.cursor
        log.debug(
            "page complete",
            page=acc.pages,
            page_rows=len(page.rows),
            total_rows=len(acc.rows),
            has_cursor=bool(acc.cursor),
        )
        if not acc.cursor or not page.rows or acc.full:
            return acc


def assemble(
    spec: QuerySpec, acc: Accumulator, now: datetime | None = None
) -> ResultEnvelope:
    """Trim accumulated rows to the cap and wrap them with provenance."""
    return ResultEnvelope(
        query=spec.text,
        rows=acc.rows[: spec.cap],
        cap=spec.cap,
        generated_at=now or datetime.now(UTC),
    )


def execute_query(
    client: J1Client,
    text: str,
    limit: Any = None,
    *,
    continue_on_failure: bool = False,
) -> ResultEnvelope | FailureRecord:
    """Run one query end to end: normalize, paginate, assemble.

    With continue_on_failure, any J1ToolError is returned as a
    FailureRecord instead of being raised.
    """
    log = get_logger("pager")
    try:
        spec = normalize_query(text, limit, max_cap=client.config.max_cap)
        with sentry_sdk.start_span(
            op="j1.query", description=spec.text[:100]
        ) as span:
            acc = paginate(client, spec)
            span.set_data("pages", acc.pages)
            span.set_data("row_count", len(acc.rows))
        envelope = assemble(spec, acc)
    except J1ToolError as e:
        if not continue_on_failure:
            raise
        log.debug("query failed, continuing", query=text, error=e.message)
        return FailureRecord(
            query=text,
            error=e.message,
            error_type=type(e).__name__,
            timestamp=datetime.now(UTC),
        )

    log.debug("query complete", rows=envelope.row_count, cap=envelope.cap)
    return envelope


def execute_items(
    client: J1Client,
    queries: Iterable[str],
    limit: Any = None,
    *,
    continue_on_failure: bool = False,
) -> list[ResultEnvelope | FailureRecord]:
    """Run independent queries one after another."""
    return [
        execute_query(client, text, limit, continue_on_failure=continue_on_failure)
        for text in queries
    ]
