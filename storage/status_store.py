"""
Status File Store
JSON snapshot of run progress shared with the external launcher
"""
from __future__ import annotations

from contextlib import suppress
from datetime import datetime, timedelta
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Dict, Optional, Union

from core import RunState, RunStatus, utcnow


logger = logging.getLogger(__name__)


class StatusFileStore:
    """
    Whole-document status file

    Every write replaces the file atomically so readers never see a partial
    document. Parent directories are created on demand.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def write(self, status: RunStatus) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(status.to_document(), ensure_ascii=False, indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            with suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def read(self) -> Optional[RunStatus]:
        """Last written status, or None when missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return RunStatus.model_validate(data)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to read status file {self.path}: {exc}")
            return None

    def describe(self, max_age_seconds: float, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        return describe_status(self.read(), max_age_seconds, now=now)


def is_stale(status: RunStatus, max_age_seconds: float, *, now: Optional[datetime] = None) -> bool:
    """A running status whose last update is older than the allowed age."""
    if status.status != RunState.RUNNING:
        return False
    if status.last_updated_at is None:
        return True
    now = now or utcnow()
    return now - status.last_updated_at > timedelta(seconds=max_age_seconds)


def describe_status(
    status: Optional[RunStatus],
    max_age_seconds: float,
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Health view for the launcher/UI; stale runs are reported as errors."""
    if status is None:
        return {"status": RunState.IDLE.value, "stale": False, "message": "No run recorded."}

    document = status.to_document()
    stale = is_stale(status, max_age_seconds, now=now)
    document["stale"] = stale
    if stale:
        document["status"] = RunState.ERROR.value
        document["message"] = (
            f"Run stopped reporting progress (last update {document.get('lastUpdatedAt') or 'unknown'})."
        )
    return document
