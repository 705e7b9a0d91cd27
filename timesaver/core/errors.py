from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ValidationIssue:
    level: str              # "error" | "warning"
    message: str
    hint: Optional[str] = None


class ConfigurationError(ValueError):
    """Raised before any search step when the layout or problem input is inconsistent."""
    def __init__(self, issues: List[ValidationIssue]):
        self.issues = issues
        lines = ["Configuration invalid:"]
        for it in issues:
            if it.level == "error":
                lines.append(f"- {it.message}" + (f" | hint: {it.hint}" if it.hint else ""))
        super().__init__("\n".join(lines))

    @classmethod
    def single(cls, message: str, hint: Optional[str] = None) -> "ConfigurationError":
        return cls([ValidationIssue("error", message, hint)])


class IllegalActionError(ValueError):
    """Raised when an action is applied to a state in which it is not legal."""
