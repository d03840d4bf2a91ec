"""
Stage 4: Normalize

Even out the loop's overall loudness.

    Requires: audio/loop
    Produces: audio/final
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import ArtifactRef, Invocation, build_invocation, encode_args, mp3_artifact


CONTRACT = StageContract(
    name="normalize",
    requires=frozenset({"audio/loop"}),
    produces=frozenset({"audio/final"}),
)


class NormalizeStage(Stage):
    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        return "Loudness normalize"

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.final, "audio/final", "Loudness-normalized loop")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        loop = ctx.input_for("audio/loop")
        return [
            build_invocation(
                ["-i", str(loop.path)],
                ["-af", filters.chain(filters.loudnorm()).render(),
                 *encode_args(cfg.sample_rate, cfg.final_bitrate)],
                ctx.paths.final,
            )
        ]
