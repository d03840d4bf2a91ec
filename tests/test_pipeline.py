"""
rainmix Pipeline Tests

Runs the orchestrator against the recording fake engine.

Coverage:
- Fixed stage order and explicit output -> input chaining
- 6 outputs by default, 8 with the storm undertone
- Fail-fast on the first engine failure
- Plan-time failures before any engine call
- Re-running overwrites outputs in place
"""

import io
from dataclasses import replace

import pytest

from rainmix import pipeline as pipeline_module
from rainmix.contracts import ValidationError
from rainmix.pipeline import STAGE_ORDER, load_stages, run_pipeline, source_artifact
from rainmix.probe import ProbedDuration
from rainmix.report import Reporter
from rainmix.stages.base import StageFailure
from rainmix.workspace import derive_paths


MANDATORY = [
    "rain_clean.mp3",
    "rain_mixed.mp3",
    "rain_loop.mp3",
    "rain_final.mp3",
    "rain_phone.mp3",
    "rain_room.mp3",
]


@pytest.fixture
def quiet_reporter():
    return Reporter(stream=io.StringIO())


def input_of(call: list[str]) -> list[str]:
    """Paths following each -i flag."""
    return [call[i + 1] for i, arg in enumerate(call) if arg == "-i"]


class TestStageOrder:

    def test_registry_order(self):
        assert [name for name, _, _ in STAGE_ORDER] == [
            "clean", "layer", "loop", "normalize", "phone", "room", "storm",
        ]

    def test_load_stages_matches_registry(self):
        assert [s.contract.name for s in load_stages()] == [name for name, _, _ in STAGE_ORDER]

    def test_misordered_registry_rejected_before_running(
        self, monkeypatch, config, paths, fake_engine, duration, quiet_reporter
    ):
        monkeypatch.setattr(pipeline_module, "STAGE_ORDER", list(reversed(STAGE_ORDER)))

        with pytest.raises(ValidationError) as exc_info:
            run_pipeline(config, paths, fake_engine, duration, quiet_reporter)

        assert exc_info.value.stage == "room"
        assert exc_info.value.missing_roles == {"audio/final"}
        assert fake_engine.calls == []
        assert not paths.out_dir.exists()


class TestDefaultRun:

    def test_produces_six_outputs_in_order(self, config, paths, fake_engine, duration, quiet_reporter):
        artifacts = run_pipeline(config, paths, fake_engine, duration, quiet_reporter)

        assert fake_engine.outputs() == MANDATORY
        assert sorted(p.name for p in paths.out_dir.iterdir()) == sorted(MANDATORY)
        assert all((paths.out_dir / name).stat().st_size > 0 for name in MANDATORY)
        assert [a.role for a in artifacts] == [
            "audio/source", "audio/clean", "audio/mixed", "audio/loop",
            "audio/final", "audio/phone", "audio/room",
        ]

    def test_each_stage_consumes_previous_output(self, config, paths, fake_engine, duration, quiet_reporter):
        run_pipeline(config, paths, fake_engine, duration, quiet_reporter)
        inputs = [input_of(call) for call in fake_engine.calls]
        assert inputs == [
            [str(paths.input_path)],
            [str(paths.clean)],
            [str(paths.mixed)],
            [str(paths.loop)],
            [str(paths.final)],
            [str(paths.final)],
        ]

    def test_creates_output_directory(self, config, paths, fake_engine, duration, quiet_reporter):
        assert not paths.out_dir.exists()
        run_pipeline(config, paths, fake_engine, duration, quiet_reporter)
        assert paths.out_dir.is_dir()

    def test_reports_each_stage_before_running(self, config, paths, fake_engine, duration):
        stream = io.StringIO()
        run_pipeline(config, paths, fake_engine, duration, Reporter(stream=stream))
        lines = stream.getvalue().splitlines()
        assert len(lines) == 6
        assert lines[0] == f">> Cleaning -> {paths.clean}"
        assert lines[-1] == f">> Room mix (bass +6dB @80Hz) -> {paths.room}"


class TestRumbleRun:

    def test_produces_eight_outputs(self, config, paths, fake_engine, duration, quiet_reporter):
        run_pipeline(replace(config, rumble_on=True), paths, fake_engine, duration, quiet_reporter)
        expected = MANDATORY + ["lowrumble.wav", "rain_distantstorm.mp3"]
        assert fake_engine.outputs() == expected
        assert sorted(p.name for p in paths.out_dir.iterdir()) == sorted(expected)

    def test_storm_mixes_room_with_rumble(self, config, paths, fake_engine, duration, quiet_reporter):
        run_pipeline(replace(config, rumble_on=True), paths, fake_engine, duration, quiet_reporter)
        assert input_of(fake_engine.calls[-1]) == [str(paths.room), str(paths.rumble)]


class TestFailFast:

    def test_engine_failure_stops_pipeline(self, config, paths, make_engine, duration, quiet_reporter):
        engine = make_engine(fail_on="rain_mixed.mp3", returncode=183)

        with pytest.raises(StageFailure) as exc_info:
            run_pipeline(config, paths, engine, duration, quiet_reporter)

        failure = exc_info.value
        assert failure.stage == "layer"
        assert failure.returncode == 183
        assert failure.errors[0]["code"] == "ENGINE_FAILED"
        assert "Error while filtering" in failure.errors[0]["detail"]["stderr"]
        assert engine.outputs() == ["rain_clean.mp3", "rain_mixed.mp3"]
        assert not paths.loop.exists()

    def test_no_cleanup_after_failure(self, config, paths, make_engine, duration, quiet_reporter):
        engine = make_engine(fail_on="rain_phone.mp3")
        with pytest.raises(StageFailure):
            run_pipeline(config, paths, engine, duration, quiet_reporter)
        assert paths.final.exists()
        assert not paths.room.exists()

    def test_engine_that_cannot_start(self, config, paths, duration, quiet_reporter):
        class MissingBinary:
            def run(self, args):
                raise FileNotFoundError("ffmpeg")

        with pytest.raises(StageFailure) as exc_info:
            run_pipeline(config, paths, MissingBinary(), duration, quiet_reporter)
        assert exc_info.value.stage == "clean"
        assert exc_info.value.returncode is None

    def test_plan_failure_runs_nothing(self, config, paths, fake_engine, quiet_reporter):
        with pytest.raises(StageFailure):
            run_pipeline(config, paths, fake_engine, ProbedDuration(4, probed=True), quiet_reporter)
        assert fake_engine.calls == []
        assert not paths.out_dir.exists()


class TestIdempotence:

    def test_second_run_overwrites_in_place(self, config, paths, fake_engine, duration, quiet_reporter):
        run_pipeline(config, paths, fake_engine, duration, quiet_reporter)
        first = sorted(p.name for p in paths.out_dir.iterdir())
        (paths.clean).write_bytes(b"stale")

        run_pipeline(config, paths, fake_engine, duration, quiet_reporter)
        second = sorted(p.name for p in paths.out_dir.iterdir())

        assert first == second
        assert len(fake_engine.calls) == 12
        assert paths.clean.read_bytes() != b"stale"


class TestSourceArtifact:

    def test_wav_input(self, tmp_path):
        artifact = source_artifact(derive_paths(tmp_path / "rain.wav"))
        assert artifact.role == "audio/source"
        assert artifact.type.startswith("audio/")

    def test_unknown_extension(self, tmp_path):
        artifact = source_artifact(derive_paths(tmp_path / "rain.take7"))
        assert artifact.type == "audio/unknown"
