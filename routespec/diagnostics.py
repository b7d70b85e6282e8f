"""
Diagnostics sink for a compilation pass.

``warn`` reports a non-fatal problem (a fragment was discarded),
``fail`` reports a problem that aborted the current route. Both are
logged and recorded so callers can decide how strict to be.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .faults import Fault, Severity

logger = logging.getLogger("routespec.diagnostics")


@dataclass
class Diagnostic:
    severity: Severity
    message: str
    location: Optional[str] = None
    fault: Optional[Fault] = None

    def format(self) -> str:
        if self.location:
            return f"{self.severity.value}: {self.message} [{self.location}]"
        return f"{self.severity.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "location": self.location,
            "fault": self.fault.to_dict() if self.fault else None,
        }


@dataclass
class Diagnostics:
    """Records every diagnostic and forwards it to ``logging``."""

    records: List[Diagnostic] = field(default_factory=list)
    logger: logging.Logger = field(default=logger, repr=False)

    def warn(self, message: str, location: Optional[str] = None, fault: Optional[Fault] = None) -> None:
        self.records.append(Diagnostic(Severity.WARN, message, location, fault))
        self.logger.warning("%s [%s]", message, location or "-")

    def fail(self, message: str, location: Optional[str] = None, fault: Optional[Fault] = None) -> None:
        self.records.append(Diagnostic(Severity.ERROR, message, location, fault))
        self.logger.error("%s [%s]", message, location or "-")

    def clear(self) -> None:
        self.records.clear()

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.records if d.severity is Severity.WARN]

    @property
    def failures(self) -> List[Diagnostic]:
        return [d for d in self.records if d.severity is Severity.ERROR]

    @property
    def failed(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.records)
