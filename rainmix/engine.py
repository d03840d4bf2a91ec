"""
rainmix Engine - ffmpeg / ffprobe adapter.

Responsibilities:
- Locate the external tools
- Run one ffmpeg invocation to completion
- Query a file's duration through ffprobe

Invariants:
- This is the only module that spawns processes
- Invocations never run concurrently
- Failures surface as subprocess.CalledProcessError (never swallowed here)
"""

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Sequence


logger = logging.getLogger(__name__)

# Quiet, non-interactive, always overwrite outputs
FFMPEG_BASE_ARGS = ("-hide_banner", "-nostdin", "-loglevel", "error", "-y")

PROBE_DURATION_ARGS = (
    "-v", "error",
    "-show_entries", "format=duration",
    "-of", "default=noprint_wrappers=1:nokey=1",
)


class FFmpegEngine:
    """Runs the external audio engine."""

    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe"):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    def is_available(self) -> bool:
        """True when both ffmpeg and ffprobe resolve on PATH."""
        return shutil.which(self.ffmpeg) is not None and shutil.which(self.ffprobe) is not None

    def run(self, args: Sequence[str]) -> None:
        """
        Run ffmpeg with the given arguments.

        Raises:
            subprocess.CalledProcessError: On non-zero exit; stderr is attached
                as undecoded bytes.
        """
        cmd = [self.ffmpeg, *FFMPEG_BASE_ARGS, *args]
        logger.debug("Running: %s", shlex.join(cmd))
        subprocess.run(
            cmd,
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )

    def probe_duration(self, path: Path) -> str:
        """
        Return ffprobe's raw duration output for path (e.g. "60.023000").

        Raises:
            subprocess.CalledProcessError: If ffprobe exits non-zero.
        """
        cmd = [self.ffprobe, *PROBE_DURATION_ARGS, str(path)]
        logger.debug("Probing: %s", shlex.join(cmd))
        result = subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
            errors="replace",
        )
        return result.stdout.strip()
