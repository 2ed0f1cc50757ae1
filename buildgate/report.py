"""Diagnostic sink with per-run "once" deduplication."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from .logging import get_logger
from .models import MessageName, ReportLevel

_LOG_LEVELS = {
    ReportLevel.WARNING: logging.WARNING,
    ReportLevel.INFO: logging.INFO,
}


@dataclass(frozen=True)
class ReportEntry:
    """A diagnostic that made it past deduplication."""

    level: ReportLevel
    kind: MessageName
    message: str
    key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "level": self.level.value,
            "kind": self.kind.value,
            "message": self.message,
        }


class Report:
    """Collects warnings and infos for one install run.

    Entries are keyed by ``(level, kind, key)``; the key defaults to the
    message text. A repeated emission for the same key is dropped. The sink is
    safe to share between threads resolving different packages.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or get_logger("report")
        self._lock = threading.Lock()
        self._seen: Set[Tuple[ReportLevel, MessageName, str]] = set()
        self._entries: List[ReportEntry] = []

    def report_warning_once(
        self, kind: MessageName, message: str, *, key: Optional[str] = None
    ) -> bool:
        return self.report_once(ReportLevel.WARNING, kind, message, key=key)

    def report_info_once(
        self, kind: MessageName, message: str, *, key: Optional[str] = None
    ) -> bool:
        return self.report_once(ReportLevel.INFO, kind, message, key=key)

    @property
    def entries(self) -> List[ReportEntry]:
        with self._lock:
            return list(self._entries)

    def warnings(self) -> List[ReportEntry]:
        return [entry for entry in self.entries if entry.level is ReportLevel.WARNING]

    def infos(self) -> List[ReportEntry]:
        return [entry for entry in self.entries if entry.level is ReportLevel.INFO]

    def has_warnings(self) -> bool:
        return bool(self.warnings())

    def report_once(
        self,
        level: ReportLevel,
        kind: MessageName,
        message: str,
        *,
        key: Optional[str] = None,
    ) -> bool:
        """Record a diagnostic at ``level`` unless its key was already seen."""
        dedup_key = key if key is not None else message
        marker = (level, kind, dedup_key)
        with self._lock:
            if marker in self._seen:
                duplicate = True
            else:
                duplicate = False
                self._seen.add(marker)
                self._entries.append(
                    ReportEntry(level=level, kind=kind, message=message, key=dedup_key)
                )
        if duplicate:
            self.logger.debug("Suppressed repeated %s for %s", kind.value, dedup_key)
            return False
        self.logger.log(_LOG_LEVELS[level], "%s: %s", kind.value, message)
        return True


__all__ = ["Report", "ReportEntry"]
