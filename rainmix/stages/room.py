"""
Stage 6: Room export

Mild bass lift for subwoofers and rooms, then a low-pass.

    Requires: audio/final
    Produces: audio/room
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import ArtifactRef, Invocation, build_invocation, encode_args, mp3_artifact


CONTRACT = StageContract(
    name="room",
    requires=frozenset({"audio/final"}),
    produces=frozenset({"audio/room"}),
)


class RoomStage(Stage):
    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        cfg = ctx.config
        return (
            f"Room mix (bass +{filters.format_number(cfg.bass_gain_db)}dB "
            f"@{filters.format_number(cfg.bass_freq_hz)}Hz)"
        )

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.room, "audio/room", "Bass-lifted room export")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        final = ctx.input_for("audio/final")
        chain = filters.chain(
            filters.bass(cfg.bass_gain_db, cfg.bass_freq_hz, cfg.bass_width),
            filters.lowpass(cfg.room_lowpass_hz),
        )
        return [
            build_invocation(
                ["-i", str(final.path)],
                ["-af", chain.render(), *encode_args(cfg.sample_rate, cfg.final_bitrate)],
                ctx.paths.room,
            )
        ]
