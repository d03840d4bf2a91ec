"""
rainmix CLI - Argument parsing and dispatch.

Responsibilities:
- Precondition checks (engine on PATH, input argument, input file)
- Logging setup
- Printing errors
- Exit codes

Exit codes:
    0  all enabled stages completed
    1  usage, missing engine, missing input or invalid configuration
    N  a stage failed; N is the engine's exit status (1 if unknown)

Forbidden:
- No filter logic
- No direct engine invocations (only via the pipeline and prober)
"""

import argparse
import logging
import sys
from pathlib import Path

from rainmix.config import ConfigError, LoggingConfig, RenderConfig
from rainmix.contracts import ValidationError
from rainmix.engine import FFmpegEngine
from rainmix.filters import FilterError
from rainmix.stages.base import StageFailure


logger = logging.getLogger(__name__)

USAGE = "Usage: rainmix <input-audio-file>"
INSTALL_HINT = "Please install ffmpeg (and ffprobe)."


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rainmix",
        usage="%(prog)s <input-audio-file>",
        description=(
            "Render a rain recording into cleaned, layered, loopable and\n"
            "device-targeted MP3s in <input-base>_renders/.\n\n"
            "Stages: clean, pink-noise layer, loop splice, loudness normalize,\n"
            "phone export, room export, and (optional) distant storm undertone.\n"
            "Requires ffmpeg and ffprobe on PATH."
        ),
        epilog="Set RAINMIX_LOG_LEVEL=DEBUG to log every engine command.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input",
        nargs="?",
        metavar="INPUT",
        help="Path to the input audio file.",
    )
    return parser


def configure_logging(config: LoggingConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _print_stage_failure(exc: StageFailure) -> None:
    print(f"Error: {exc}", file=sys.stderr)
    for error in exc.errors:
        stderr_tail = error.get("detail", {}).get("stderr")
        if stderr_tail:
            print(stderr_tail, file=sys.stderr)


def cmd_render(
    input_arg: str | None,
    engine=None,
    config: RenderConfig | None = None,
    reporter=None,
) -> int:
    """
    Check preconditions, then run the whole pipeline on one input.

    Returns exit code.
    """
    from rainmix.pipeline import run_pipeline
    from rainmix.probe import probe_duration
    from rainmix.report import Reporter
    from rainmix.workspace import derive_paths

    engine = engine or FFmpegEngine()
    reporter = reporter or Reporter()

    if not engine.is_available():
        print(f"Error: {INSTALL_HINT}", file=sys.stderr)
        return 1

    if not input_arg:
        print(USAGE, file=sys.stderr)
        return 1

    input_path = Path(input_arg)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1
    if not input_path.is_file():
        print(f"Error: Input path is not a file: {input_path}", file=sys.stderr)
        return 1

    try:
        config = config or RenderConfig()
    except ConfigError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    paths = derive_paths(input_path)
    logger.info("Input: %s", paths.input_path)
    logger.info("Output directory: %s", paths.out_dir)

    duration = probe_duration(engine, input_path)

    try:
        run_pipeline(config, paths, engine, duration, reporter)
    except (FilterError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except StageFailure as e:
        _print_stage_failure(e)
        if e.returncode is not None and e.returncode > 0:
            return e.returncode
        return 1

    reporter.finished(paths.out_dir)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args, extra = parser.parse_known_args(argv)

    if extra:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    configure_logging(LoggingConfig.from_env())
    sys.exit(cmd_render(args.input))
