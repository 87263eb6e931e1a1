"""JSON formatter for ResultEnvelope output."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from j1_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from j1_tool.core.models import ResultEnvelope


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: ResultEnvelope) -> Iterator[str]:
        payload = result.model_dump(mode="json", by_alias=True)
        if self.compact:
            yield json.dumps(payload, default=str)
        else:
            yield json.dumps(payload, indent=2, default=str)


registry.register("json", JSONFormatter)
