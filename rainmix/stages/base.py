"""
rainmix Stage Base Utilities.

Responsibilities:
- StageFailure exception for pipeline control flow
- Error object builder
- Artifact references and engine invocations
- Shared encode arguments

Invariants:
- A failed invocation always raises StageFailure; nothing is retried
- Invocation.output is the last argument passed to the engine
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)

MP3_CODEC = "libmp3lame"
STDERR_TAIL_LINES = 10


class StageFailure(Exception):
    """
    Raised when a stage fails.

    The orchestrator does not catch this; it propagates to the CLI,
    which reports it and exits with returncode (or 1).
    """

    def __init__(self, stage: str, errors: list[dict], returncode: int | None = None):
        self.stage = stage
        self.errors = errors
        self.returncode = returncode
        message = f"Stage '{stage}' failed"
        if errors:
            message = f"{message}: {errors[0]['message']}"
        super().__init__(message)


def build_error(
    code: str,
    message: str,
    stage: str,
    detail: dict | None = None,
) -> dict:
    """
    Build structured error object.

    Args:
        code: Error code (e.g., "ENGINE_FAILED")
        message: Human-readable error message
        stage: Stage name where error occurred
        detail: Optional additional details

    Returns:
        Structured error dictionary.
    """
    error: dict = {
        "code": code,
        "message": message,
        "stage": stage,
    }
    if detail is not None:
        error["detail"] = detail
    return error


# =============================================================================
# Artifacts
# =============================================================================


@dataclass(frozen=True)
class ArtifactRef:
    """
    A file produced (or consumed) by a stage.

    Attributes:
        path: Location of the file
        type: MIME type (e.g., "audio/mpeg")
        role: Artifact role (e.g., "audio/clean")
        description: Human-readable description
    """
    path: Path
    type: str
    role: str
    description: str


def build_artifact_ref(
    path: Path,
    artifact_type: str,
    role: str,
    description: str,
) -> ArtifactRef:
    """Build a standardized artifact reference."""
    return ArtifactRef(
        path=Path(path),
        type=artifact_type,
        role=role,
        description=description,
    )


def mp3_artifact(path: Path, role: str, description: str) -> ArtifactRef:
    return build_artifact_ref(path, "audio/mpeg", role, description)


# =============================================================================
# Invocations
# =============================================================================


@dataclass(frozen=True)
class Invocation:
    """
    One engine call.

    Attributes:
        args: Engine arguments (binary and global flags excluded)
        output: File the call writes
    """
    args: tuple[str, ...]
    output: Path

    def __post_init__(self) -> None:
        if not self.args or self.args[-1] != str(self.output):
            raise ValueError("Invocation output must be the last argument")


def encode_args(sample_rate: int, bitrate: str) -> list[str]:
    """Resample, keep input metadata, and encode MP3 at bitrate."""
    return [
        "-ar", str(sample_rate),
        "-map_metadata", "0",
        "-c:a", MP3_CODEC,
        "-b:a", bitrate,
    ]


def build_invocation(inputs: list[str], middle: list[str], output: Path) -> Invocation:
    """
    Assemble an invocation from input args, processing args and an output.

    Args:
        inputs: e.g. ["-i", "in.wav"] or ["-f", "lavfi", "-i", "sine=..."]
        middle: Filter and encode arguments
        output: Output file path (appended last)
    """
    return Invocation(args=tuple([*inputs, *middle, str(output)]), output=Path(output))


def _stderr_tail(stderr: str | bytes | None) -> str:
    if not stderr:
        return ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    lines = stderr.strip().splitlines()
    return "\n".join(lines[-STDERR_TAIL_LINES:])


def run_invocation(engine, stage: str, invocation: Invocation) -> Path:
    """
    Run one invocation and return the path it wrote.

    Raises:
        StageFailure: If the engine exits non-zero or cannot be started.
    """
    try:
        engine.run(list(invocation.args))
    except subprocess.CalledProcessError as e:
        tail = _stderr_tail(e.stderr)
        error = build_error(
            code="ENGINE_FAILED",
            message=f"engine exited with status {e.returncode} writing {invocation.output}",
            stage=stage,
            detail={"returncode": e.returncode, "stderr": tail},
        )
        raise StageFailure(stage, [error], returncode=e.returncode) from e
    except OSError as e:
        error = build_error(
            code="ENGINE_UNAVAILABLE",
            message=f"engine could not be started: {e}",
            stage=stage,
        )
        raise StageFailure(stage, [error]) from e
    logger.debug("Stage %s wrote %s", stage, invocation.output)
    return invocation.output
