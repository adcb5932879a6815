"""
Stored trace loading.

Traces live on disk as ``<ROUTES_DIR>/<trace_id>.json`` with a top-level
``coordinates`` array. Reads run in a worker thread so a slow disk does not
stall other requests on the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any

from config import require_routes_dir
from core.exceptions import TraceLoadException, ValidationException

logger = logging.getLogger(__name__)

TRACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


def validate_trace_id(trace_id: str) -> str:
    if not TRACE_ID_PATTERN.fullmatch(trace_id or ""):
        msg = "Invalid route identifier."
        raise ValidationException(msg, {"trace_id": trace_id})
    return trace_id


class TraceStore:
    def __init__(self, routes_dir: Path | str | None = None) -> None:
        self._routes_dir = Path(routes_dir) if routes_dir else None

    @property
    def routes_dir(self) -> Path:
        return self._routes_dir or require_routes_dir()

    def path_for(self, trace_id: str) -> Path:
        return self.routes_dir / f"{validate_trace_id(trace_id)}.json"

    async def load(self, trace_id: str) -> Any:
        """Load and parse a stored trace document.

        Any JSON value except ``null`` is returned as parsed; callers decide
        whether its shape is usable.

        Raises:
            ValidationException: the identifier is not a plain file stem.
            TraceLoadException: the file is missing, unreadable, not valid
                JSON, or holds ``null``.
        """
        path = self.path_for(trace_id)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read route file %s: %s", path, e)
            msg = "Failed to read route data file."
            raise TraceLoadException(msg, {"reason": str(e)}) from e

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in route file %s: %s", path, e)
            msg = "Invalid JSON format in file."
            raise TraceLoadException(msg, {"reason": str(e)}) from e

        if document is None:
            msg = "Invalid JSON format in file."
            raise TraceLoadException(msg, {"reason": "root is null"})
        return document
