"""
Stage 3: Loop splice

Cross-fade the end of the mixed track into its start so the result
repeats without a seam.

    Requires: audio/mixed
    Produces: audio/loop

The track is split in two: the body (everything after the first
xfade_seconds) and the head (the first xfade_seconds). The body's tail
fades out over the head with triangular curves, so the file ends exactly
where it begins. The output is xfade_seconds shorter than the input.
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import (
    ArtifactRef,
    Invocation,
    StageFailure,
    build_error,
    build_invocation,
    encode_args,
    mp3_artifact,
)


CONTRACT = StageContract(
    name="loop",
    requires=frozenset({"audio/mixed"}),
    produces=frozenset({"audio/loop"}),
)


def build_loop_graph(xfade_seconds: float) -> str:
    """Split, trim body and head, then cross-fade body tail into head."""
    split = filters.chain(filters.asplit(2), inputs=["0:a"], outputs=["body", "head"])
    body = filters.chain(
        filters.atrim(start=xfade_seconds),
        filters.asetpts(),
        inputs=["body"],
        outputs=["tail"],
    )
    head = filters.chain(
        filters.atrim(end=xfade_seconds),
        filters.asetpts(),
        inputs=["head"],
        outputs=["lead"],
    )
    splice = filters.chain(
        filters.acrossfade(xfade_seconds, overlap=True, curve="tri"),
        inputs=["tail", "lead"],
    )
    return filters.graph(split, body, head, splice)


class LoopStage(Stage):
    """Seamless end -> start splice."""

    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        return f"Making seamless loop (acrossfade {filters.format_number(ctx.config.xfade_seconds)}s)"

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.loop, "audio/loop", "Seamlessly loopable mix")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        needed = 2 * cfg.xfade_seconds
        if ctx.duration.probed and ctx.duration.seconds < needed:
            raise StageFailure(self.contract.name, [
                build_error(
                    code="LOOP_INPUT_TOO_SHORT",
                    message=(
                        f"input is {ctx.duration.seconds}s but a {filters.format_number(cfg.xfade_seconds)}s "
                        f"crossfade needs at least {filters.format_number(needed)}s"
                    ),
                    stage=self.contract.name,
                )
            ])
        mixed = ctx.input_for("audio/mixed")
        return [
            build_invocation(
                ["-i", str(mixed.path)],
                ["-filter_complex", build_loop_graph(cfg.xfade_seconds), *encode_args(cfg.sample_rate, cfg.final_bitrate)],
                ctx.paths.loop,
            )
        ]
