from __future__ import annotations

import re
from dataclasses import dataclass

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


@dataclass(frozen=True)
class RunConfig:
    """Operator settings for one run. Built once from the command line."""

    headless: bool = True
    extensions: bool = True
    check_interval: int = 30
    once: bool = False
    page_timeout: float = 10.0
    command: str | None = None
    verbose: int = 0
    version: str = "dev"

    @property
    def page_timeout_ms(self) -> float:
        return self.page_timeout * 1000


def parse_duration(value: str) -> float:
    """
    What it does:
    - Parses durations like "10s", "1m30s", "500ms" or a bare number of seconds.

    Behavior:
    - Returns seconds as a float.
    - Raises ValueError for empty, negative or malformed input.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if seconds < 0:
            raise ValueError(f"negative duration: {value!r}")
        return seconds

    pos = 0
    total = 0.0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()

    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total
