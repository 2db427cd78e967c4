"""Terminal result of one open/create workflow."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class OutcomeKind(Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    location: Optional[Path] = None
    document: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def completed(cls, location: Path, document: Any = None) -> "Outcome":
        return cls(OutcomeKind.COMPLETED, location=location, document=document)

    @classmethod
    def cancelled(cls) -> "Outcome":
        return cls(OutcomeKind.CANCELLED)

    @classmethod
    def failed(cls, error: BaseException, location: Optional[Path] = None) -> "Outcome":
        return cls(OutcomeKind.FAILED, location=location, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.COMPLETED
