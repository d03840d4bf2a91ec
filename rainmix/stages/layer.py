"""
Stage 2: Layer

Mix a generated pink-noise bed under the clean track, optionally
followed by a very gentle echo for patio reflections.

    Requires: audio/clean
    Produces: audio/mixed

The noise bed lasts the probed input duration so it covers the
whole clean track.
"""

from rainmix import filters
from rainmix.contracts import Stage, StageContract, StageContext
from rainmix.stages.base import ArtifactRef, Invocation, build_invocation, encode_args, mp3_artifact


CONTRACT = StageContract(
    name="layer",
    requires=frozenset({"audio/clean"}),
    produces=frozenset({"audio/mixed"}),
)

NOISE_LABEL = "p"


def build_layer_graph(ctx: StageContext) -> str:
    """Pink-noise source feeding a weighted mix with input 0."""
    cfg = ctx.config
    noise = filters.chain(
        filters.anoisesrc("pink", ctx.duration.seconds, cfg.sample_rate),
        outputs=[NOISE_LABEL],
    )
    mix = filters.chain(
        filters.amix([1, cfg.pink_weight]),
        filters.volume(1.0),
        inputs=["0:a", NOISE_LABEL],
    )
    if cfg.echo_on:
        mix = mix.then(
            filters.aecho(cfg.echo_in_gain, cfg.echo_out_gain, cfg.echo_delay_ms, cfg.echo_decay)
        )
    return filters.graph(noise, mix)


class LayerStage(Stage):
    """Pink-noise bed + optional echo."""

    contract = CONTRACT

    def describe(self, ctx: StageContext) -> str:
        return f"Adding pink-noise bed (weight={filters.format_number(ctx.config.pink_weight)})"

    def outputs(self, ctx: StageContext) -> list[ArtifactRef]:
        return [mp3_artifact(ctx.paths.mixed, "audio/mixed", "Clean track layered over pink noise")]

    def plan(self, ctx: StageContext) -> list[Invocation]:
        cfg = ctx.config
        clean = ctx.input_for("audio/clean")
        return [
            build_invocation(
                ["-i", str(clean.path)],
                ["-filter_complex", build_layer_graph(ctx), *encode_args(cfg.sample_rate, cfg.final_bitrate)],
                ctx.paths.mixed,
            )
        ]
