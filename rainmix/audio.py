"""
rainmix Audio Helpers

Library Stack:
    - soundfile: file info (libsndfile-backed)

Rendering itself is done by the external engine; these helpers only
inspect rendered files.
"""

from pathlib import Path

import soundfile as sf


def read_duration_seconds(path: Path) -> float:
    """
    Return a file's duration in seconds.

    Raises:
        RuntimeError: If libsndfile cannot decode the file
            (soundfile.LibsndfileError is a RuntimeError).
    """
    info = sf.info(str(path))
    return float(info.frames) / float(info.samplerate)


def try_read_duration_seconds(path: Path) -> float | None:
    """Like read_duration_seconds, but None when the file cannot be decoded."""
    try:
        return read_duration_seconds(path)
    except RuntimeError:
        return None
