"""
rainmix Reporter - Human-facing progress output.

Writes to stdout regardless of the logging level:
    >> <description> -> <output path>     (before each stage)
    Done. Files in: <out_dir>             (after the last stage)
    <size>  <duration>  <name>            (one line per file, by name)
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from rainmix.audio import try_read_duration_seconds
from rainmix.utils import format_duration, format_size


@dataclass(frozen=True)
class OutputEntry:
    """A file found in the output directory."""
    name: str
    size: int
    duration: float | None


def list_outputs(out_dir: Path) -> list[OutputEntry]:
    """List regular files in out_dir, sorted by name."""
    entries = []
    for path in sorted(Path(out_dir).iterdir(), key=lambda p: p.name):
        if not path.is_file():
            continue
        entries.append(OutputEntry(
            name=path.name,
            size=path.stat().st_size,
            duration=try_read_duration_seconds(path),
        ))
    return entries


class Reporter:
    """Prints stage progress and the final directory listing."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def stage_started(self, description: str, output: Path) -> None:
        print(f">> {description} -> {output}", file=self.stream)

    def finished(self, out_dir: Path) -> None:
        print(f"Done. Files in: {out_dir}", file=self.stream)
        for entry in list_outputs(out_dir):
            print(
                f"{format_size(entry.size):>6}  {format_duration(entry.duration):>8}  {entry.name}",
                file=self.stream,
            )
