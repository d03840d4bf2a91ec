"""
rainmix Duration Prober.

Sizes the generated pink-noise and rumble beds so they cover the input.

Invariants:
- Durations are whole seconds, truncated
- Probe failures never abort a run; FALLBACK_DURATION_SECONDS is used instead
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)

# ~62 minutes
FALLBACK_DURATION_SECONDS = 3720


@dataclass(frozen=True)
class ProbedDuration:
    """
    Duration used to size generated tracks.

    Attributes:
        seconds: Whole seconds, always positive
        probed: False when the fallback value was substituted
    """
    seconds: int
    probed: bool


def parse_duration(raw: str | None) -> int | None:
    """
    Truncate ffprobe's duration output to whole seconds.

    Returns:
        Positive integer seconds, or None for empty, non-numeric
        or non-positive output.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    try:
        seconds = int(float(text))
    except (ValueError, OverflowError):
        return None
    if seconds <= 0:
        return None
    return seconds


def probe_duration(engine, path: Path) -> ProbedDuration:
    """
    Query the input's duration, falling back to FALLBACK_DURATION_SECONDS.

    Args:
        engine: Object exposing probe_duration(path) -> str
        path: Input audio file
    """
    try:
        raw = engine.probe_duration(path)
    except (subprocess.CalledProcessError, OSError) as e:
        logger.warning(
            "Duration probe failed for %s (%s); using %ds",
            path, e, FALLBACK_DURATION_SECONDS,
        )
        return ProbedDuration(FALLBACK_DURATION_SECONDS, probed=False)

    seconds = parse_duration(raw)
    if seconds is None:
        logger.warning(
            "Unusable duration %r for %s; using %ds",
            raw, path, FALLBACK_DURATION_SECONDS,
        )
        return ProbedDuration(FALLBACK_DURATION_SECONDS, probed=False)

    logger.debug("Probed duration of %s: %ds", path, seconds)
    return ProbedDuration(seconds, probed=True)
