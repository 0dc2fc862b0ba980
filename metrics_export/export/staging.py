"""
Scratch staging of chunk responses.

One scratch file is acquired per export and reused for every chunk: the raw
response of a chunk is written to it, read back for transformation, and
overwritten by the next chunk. The file is removed on every exit path.
"""

from __future__ import annotations

import json
import logging
import tempfile
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Any

LOGGER = logging.getLogger(__name__)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class ChunkStagingBuffer:
    """
    Single-writer scratch file for one chunk's raw response at a time.

    Usage:
        >>> with ChunkStagingBuffer() as buffer:
        ...     buffer.stage(response)
        ...     raw = buffer.load()
    """

    def __init__(self, scratch_dir: str | Path | None = None) -> None:
        self._scratch_dir = Path(scratch_dir) if scratch_dir is not None else None
        self._fh: IO[str] | None = None

    def __enter__(self) -> ChunkStagingBuffer:
        if self._scratch_dir is not None:
            self._scratch_dir.mkdir(parents=True, exist_ok=True)

        self._fh = tempfile.TemporaryFile(
            mode="w+",
            encoding="utf-8",
            prefix="results.json.",
            dir=self._scratch_dir,
        )
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def stage(self, response: Any) -> int:
        """Overwrite the buffer with ``response``. Returns bytes staged."""
        fh = self._require_open()
        fh.seek(0)
        fh.truncate()
        fh.write(json.dumps(response, default=_json_default))
        fh.flush()
        return fh.tell()

    def load(self) -> Any:
        """Read back the most recently staged response."""
        fh = self._require_open()
        fh.seek(0)
        return json.loads(fh.read())

    def close(self) -> None:
        if self._fh is None:
            return
        self._fh.close()
        self._fh = None

    def _require_open(self) -> IO[str]:
        if self._fh is None:
            raise RuntimeError("ChunkStagingBuffer is not open")
        return self._fh
