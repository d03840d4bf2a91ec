"""
rainmix Workspace Tests

Output directory naming and stage output paths.
"""

from dataclasses import fields
from pathlib import Path

import pytest

from rainmix.workspace import create_output_dir, derive_paths


class TestOutputDirName:

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("storm.wav", "storm_renders"),
            ("rain.mp3", "rain_renders"),
            ("a.b.mp3", "a.b_renders"),
            ("rain", "rain_renders"),
        ],
    )
    def test_strips_only_final_extension(self, tmp_path, name, expected):
        paths = derive_paths(tmp_path / name)
        assert paths.out_dir == tmp_path / expected

    def test_output_dir_sits_beside_input(self, tmp_path):
        paths = derive_paths(tmp_path / "field" / "porch.flac")
        assert paths.out_dir == tmp_path / "field" / "porch_renders"

    def test_relative_input_stays_relative(self):
        paths = derive_paths(Path("storm.wav"))
        assert paths.out_dir == Path("storm_renders")


class TestStageOutputs:

    def test_output_names_are_fixed(self, tmp_path):
        paths = derive_paths(tmp_path / "storm.wav")
        assert paths.clean.name == "rain_clean.mp3"
        assert paths.mixed.name == "rain_mixed.mp3"
        assert paths.loop.name == "rain_loop.mp3"
        assert paths.final.name == "rain_final.mp3"
        assert paths.phone.name == "rain_phone.mp3"
        assert paths.room.name == "rain_room.mp3"
        assert paths.rumble.name == "lowrumble.wav"
        assert paths.storm.name == "rain_distantstorm.mp3"
        assert paths.clean.parent == paths.out_dir

    def test_paths_hold_only_what_a_render_touches(self, tmp_path):
        paths = derive_paths(tmp_path / "rain.wav")
        assert [f.name for f in fields(paths)] == [
            "input_path", "out_dir",
            "clean", "mixed", "loop", "final", "phone", "room", "rumble", "storm",
        ]


class TestCreateOutputDir:

    def test_derive_does_not_touch_filesystem(self, tmp_path):
        paths = derive_paths(tmp_path / "rain.wav")
        assert not paths.out_dir.exists()

    def test_create_is_idempotent(self, tmp_path):
        paths = derive_paths(tmp_path / "rain.wav")
        assert create_output_dir(paths) == paths.out_dir
        (paths.out_dir / "rain_clean.mp3").write_bytes(b"x")
        create_output_dir(paths)
        assert paths.out_dir.is_dir()
        assert (paths.out_dir / "rain_clean.mp3").read_bytes() == b"x"
