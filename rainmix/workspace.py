"""
rainmix Workspace - Output path derivation and directory creation.

Responsibilities:
- Derive the base name and <base>_renders output directory
- Name every stage output
- Create the output directory

Forbidden:
- No engine calls
- No stage logic
"""

from dataclasses import dataclass
from pathlib import Path


OUTPUT_DIR_SUFFIX = "_renders"

# Fixed output names, independent of the input name
CLEAN_NAME = "rain_clean.mp3"
MIXED_NAME = "rain_mixed.mp3"
LOOP_NAME = "rain_loop.mp3"
FINAL_NAME = "rain_final.mp3"
PHONE_NAME = "rain_phone.mp3"
ROOM_NAME = "rain_room.mp3"
RUMBLE_NAME = "lowrumble.wav"
STORM_NAME = "rain_distantstorm.mp3"


@dataclass(frozen=True)
class RenderPaths:
    """Every path a render reads or writes."""

    input_path: Path
    out_dir: Path
    clean: Path
    mixed: Path
    loop: Path
    final: Path
    phone: Path
    room: Path
    rumble: Path
    storm: Path


def derive_paths(input_path: Path) -> RenderPaths:
    """
    Derive all render paths from the input path.

    Only the final extension is stripped:
        storm.wav -> storm_renders/
        a.b.mp3   -> a.b_renders/

    Args:
        input_path: Input audio file (need not exist).

    Returns:
        RenderPaths with out_dir beside the input.
    """
    input_path = Path(input_path)
    out_dir = input_path.parent / f"{input_path.stem}{OUTPUT_DIR_SUFFIX}"
    return RenderPaths(
        input_path=input_path,
        out_dir=out_dir,
        clean=out_dir / CLEAN_NAME,
        mixed=out_dir / MIXED_NAME,
        loop=out_dir / LOOP_NAME,
        final=out_dir / FINAL_NAME,
        phone=out_dir / PHONE_NAME,
        room=out_dir / ROOM_NAME,
        rumble=out_dir / RUMBLE_NAME,
        storm=out_dir / STORM_NAME,
    )


def create_output_dir(paths: RenderPaths) -> Path:
    """
    Create the output directory if absent.

    Returns:
        Path to the output directory.

    Note:
        Idempotent; existing outputs are left for the stages to overwrite.
    """
    paths.out_dir.mkdir(parents=True, exist_ok=True)
    return paths.out_dir
