"""
Stage 7 (optional): Distant storm undertone

Generate a quiet low-frequency sine (lowrumble.wav) lasting the probed
duration, then mix it under the room export.

    Requires: audio/room
    Produces: audio/rumble, audio/storm

Runs only when RenderConfig.rumble_on is set.
"""

from rainmix import filters
from rainmix.config import RenderConfig
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import (
    ArtifactRef,
    Invocation,
    build_artifact_ref,
    build_invocation,
    encode_args,
    mp3_artifact,
)


CONTRACT = StageContract(
    name="storm",
    requires=frozenset({"audio/room"}),
    produces=frozenset({"audio/rumble", "audio/storm"}),
)


class StormStage(Stage):
    """Rumble tone + weighted mix with the room export."""

    contract = CONTRACT

    def enabled(self, config: RenderConfig) -> bool:
        return config.rumble_on

    def describe(self, ctx: StageContext) -> str:
        return (
            f"Generating distant rumble ({filters.format_number(ctx.config.rumble_freq_hz)}Hz) "
            "and mixing"
        )

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [
            build_artifact_ref(ctx.paths.rumble, "audio/wav", "audio/rumble", "Attenuated low-frequency tone"),
            mp3_artifact(ctx.paths.storm, "audio/storm", "Room export with distant rumble"),
        ]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        room = ctx.input_for("audio/room")
        tone = filters.chain(filters.sine(cfg.rumble_freq_hz, ctx.duration.seconds, cfg.sample_rate))
        level = filters.chain(filters.volume(cfg.rumble_level))
        mix = filters.chain(
            filters.amix([1, cfg.rumble_weight]),
            filters.volume(1.0),
            inputs=["0:a", "1:a"],
        )
        return [
            build_invocation(
                ["-f", "lavfi", "-i", tone.render()],
                ["-filter:a", level.render(), "-ar", str(cfg.sample_rate)],
                ctx.paths.rumble,
            ),
            build_invocation(
                ["-i", str(room.path), "-i", str(ctx.paths.rumble)],
                ["-filter_complex", filters.graph(mix), *encode_args(cfg.sample_rate, cfg.final_bitrate)],
                ctx.paths.storm,
            ),
        ]
