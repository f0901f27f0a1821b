"""Shared result types."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class NoDataResult:
    """Expected "not enough data yet" state with an actionable next step."""

    message: str
    suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error": self.message,
            "suggestion": self.suggestion,
        }
