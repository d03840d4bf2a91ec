"""
Stage 5: Phone export

Narrow the band of the final track for small drivers, at a lower bitrate.

    Requires: audio/final
    Produces: audio/phone
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import ArtifactRef, Invocation, build_invocation, encode_args, mp3_artifact


CONTRACT = StageContract(
    name="phone",
    requires=frozenset({"audio/final"}),
    produces=frozenset({"audio/phone"}),
)


class PhoneStage(Stage):
    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        cfg = ctx.config
        return f"Phone mix (HP {cfg.phone_highpass_hz}Hz, LP {cfg.phone_lowpass_hz}Hz)"

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.phone, "audio/phone", "Band-limited phone export")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        final = ctx.input_for("audio/final")
        chain = filters.chain(
            filters.highpass(cfg.phone_highpass_hz),
            filters.lowpass(cfg.phone_lowpass_hz),
        )
        return [
            build_invocation(
                ["-i", str(final.path)],
                ["-af", chain.render(), *encode_args(cfg.sample_rate, cfg.phone_bitrate)],
                ctx.paths.phone,
            )
        ]
