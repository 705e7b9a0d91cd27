from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Dict, Optional
from dotenv import load_dotenv

from timesaver.core.errors import ConfigurationError

# Load .env early (no error if missing)
load_dotenv()


def parse_sidings(text: str) -> Dict[str, int]:
    """Parse ``"A=2,B=3"`` into ``{"A": 2, "B": 3}``."""
    out: Dict[str, int] = {}
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        label, sep, length = part.partition("=")
        label = label.strip()
        if not sep or not label:
            raise ConfigurationError.single(f"Bad siding entry {part!r}", "Use LABEL=LENGTH, e.g. A=2.")
        try:
            out[label] = int(length)
        except ValueError:
            raise ConfigurationError.single(f"Siding {label!r} length {length.strip()!r} is not an integer") from None
    return out


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


@dataclass(frozen=True)
class SolverConfig:
    sidings: str = os.getenv("TIMESAVER_SIDINGS", "A=2,B=3,C=1,D=2,E=1")
    step_budget: int = int(os.getenv("TIMESAVER_STEP_BUDGET", "1000000"))
    progress_every: int = int(os.getenv("TIMESAVER_PROGRESS_EVERY", "1000"))
    # Optional wall-clock limit per solve, seconds
    deadline_s: Optional[float] = _optional_float("TIMESAVER_DEADLINE_S")
    log_level: str = os.getenv("TIMESAVER_LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("TIMESAVER_LOG_FILE")

    @property
    def siding_lengths(self) -> Dict[str, int]:
        return parse_sidings(self.sidings)
