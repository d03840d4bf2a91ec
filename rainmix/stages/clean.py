"""
Stage 1: Clean

Resample the raw input, low-pass it and apply a gentle FFT denoise.

    Requires: audio/source
    Produces: audio/clean
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import ArtifactRef, Invocation, build_invocation, encode_args, mp3_artifact


CONTRACT = StageContract(
    name="clean",
    requires=frozenset({"audio/source"}),
    produces=frozenset({"audio/clean"}),
)


class CleanStage(Stage):
    """Low-pass + gentle denoise."""

    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        return "Cleaning"

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.clean, "audio/clean", "Low-passed, denoised input")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        source = ctx.input_for("audio/source")
        chain = filters.chain(
            filters.lowpass(cfg.lowpass_hz),
            filters.afftdn(cfg.denoise_nf),
        )
        return [
            build_invocation(
                ["-i", str(source.path)],
                ["-af", chain.render(), *encode_args(cfg.sample_rate, cfg.clean_bitrate)],
                ctx.paths.clean,
            )
        ]
