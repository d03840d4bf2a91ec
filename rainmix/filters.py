"""
rainmix Filter Builder - Typed construction of ffmpeg filter expressions.

Responsibilities:
- One constructor per filter the pipeline uses, with parameter checks
- Rendering of filters, chains and labeled graphs to ffmpeg syntax

Invariants:
- Constructors raise FilterError before any expression is rendered
- Rendering is deterministic (same parameters = same string)
"""

from dataclasses import dataclass
from typing import Sequence


NOISE_COLORS = frozenset({"white", "pink", "brown", "blue", "violet", "velvet"})
CROSSFADE_CURVES = frozenset({"tri", "qsin", "esin", "hsin", "log", "ipar", "qua", "cub", "squ", "cbr", "par", "exp", "nofade"})


class FilterError(ValueError):
    """Raised when a filter is constructed with an invalid parameter."""
    pass


def format_number(value: float) -> str:
    """Render a number the way ffmpeg options expect (no trailing '.0')."""
    if isinstance(value, bool):
        raise FilterError(f"expected a number, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def _positive(filter_name: str, option: str, value: float) -> float:
    if value <= 0:
        raise FilterError(f"{filter_name}: {option} must be > 0, got {value}")
    return value


def _within(filter_name: str, option: str, value: float, low: float, high: float) -> float:
    if not low <= value <= high:
        raise FilterError(f"{filter_name}: {option} must be in [{low}, {high}], got {value}")
    return value


# =============================================================================
# Expression Types
# =============================================================================


@dataclass(frozen=True)
class Filter:
    """
    A single filter with its options.

    Attributes:
        name: ffmpeg filter name (e.g., "lowpass")
        options: Ordered key/value options, rendered as k=v pairs
        positional: Positional arguments, rendered colon-separated
    """
    name: str
    options: tuple[tuple[str, str], ...] = ()
    positional: tuple[str, ...] = ()

    def render(self) -> str:
        if self.positional:
            args = ":".join(self.positional)
        else:
            args = ":".join(f"{key}={value}" for key, value in self.options)
        return f"{self.name}={args}" if args else self.name


@dataclass(frozen=True)
class FilterChain:
    """
    Comma-joined filters with optional input and output pad labels.

    A chain without labels is a simple filtergraph, suitable for -af.
    """
    filters: tuple[Filter, ...]
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.filters:
            raise FilterError("a filter chain needs at least one filter")

    def then(self, *filters: Filter) -> "FilterChain":
        """Return a new chain with filters appended."""
        return FilterChain(self.filters + tuple(filters), self.inputs, self.outputs)

    def render(self) -> str:
        head = "".join(f"[{label}]" for label in self.inputs)
        body = ",".join(f.render() for f in self.filters)
        tail = "".join(f"[{label}]" for label in self.outputs)
        return f"{head}{body}{tail}"


def chain(*filters: Filter, inputs: Sequence[str] = (), outputs: Sequence[str] = ()) -> FilterChain:
    """Build a FilterChain from filters and pad labels."""
    return FilterChain(tuple(filters), tuple(inputs), tuple(outputs))


def graph(*chains: FilterChain) -> str:
    """Render chains as a semicolon-separated complex filtergraph."""
    if not chains:
        raise FilterError("a filtergraph needs at least one chain")
    return ";".join(c.render() for c in chains)


# =============================================================================
# Filter Constructors
# =============================================================================


def lowpass(frequency: float) -> Filter:
    _positive("lowpass", "f", frequency)
    return Filter("lowpass", (("f", format_number(frequency)),))


def highpass(frequency: float) -> Filter:
    _positive("highpass", "f", frequency)
    return Filter("highpass", (("f", format_number(frequency)),))


def afftdn(noise_floor: float) -> Filter:
    """FFT denoiser; noise_floor in dB, -80 to -20."""
    _within("afftdn", "nf", noise_floor, -80, -20)
    return Filter("afftdn", (("nf", format_number(noise_floor)),))


def aecho(in_gain: float, out_gain: float, delay_ms: float, decay: float) -> Filter:
    """Single-tap echo: in_gain:out_gain:delays(ms):decays."""
    _within("aecho", "in_gain", in_gain, 0, 1)
    _within("aecho", "out_gain", out_gain, 0, 1)
    _within("aecho", "delays", delay_ms, 0, 90000)
    _within("aecho", "decays", decay, 0, 1)
    if in_gain == 0 or out_gain == 0 or delay_ms == 0 or decay == 0:
        raise FilterError("aecho: gains, delay and decay must be non-zero")
    return Filter(
        "aecho",
        positional=tuple(format_number(v) for v in (in_gain, out_gain, delay_ms, decay)),
    )


def anoisesrc(color: str, duration: float, sample_rate: int) -> Filter:
    """Colored noise source of the given duration in seconds."""
    if color not in NOISE_COLORS:
        raise FilterError(f"anoisesrc: unknown color {color!r}")
    _positive("anoisesrc", "duration", duration)
    _positive("anoisesrc", "sample_rate", sample_rate)
    return Filter("anoisesrc", (
        ("color", color),
        ("duration", format_number(duration)),
        ("sample_rate", format_number(sample_rate)),
    ))


def sine(frequency: float, duration: float, sample_rate: int) -> Filter:
    """Sine tone source of the given duration in seconds."""
    _positive("sine", "frequency", frequency)
    _positive("sine", "duration", duration)
    _positive("sine", "sample_rate", sample_rate)
    return Filter("sine", (
        ("frequency", format_number(frequency)),
        ("duration", format_number(duration)),
        ("sample_rate", format_number(sample_rate)),
    ))


def amix(weights: Sequence[float]) -> Filter:
    """Weighted mix; one weight per input, in input order."""
    if len(weights) < 2:
        raise FilterError("amix: needs at least two inputs")
    for weight in weights:
        if weight < 0:
            raise FilterError(f"amix: weights must be >= 0, got {weight}")
    return Filter("amix", (
        ("inputs", str(len(weights))),
        ("weights", " ".join(format_number(w) for w in weights)),
    ))


def volume(level: float) -> Filter:
    if level < 0:
        raise FilterError(f"volume: level must be >= 0, got {level}")
    return Filter("volume", positional=(format_number(float(level)),))


def acrossfade(duration: float, overlap: bool = True, curve: str = "tri") -> Filter:
    """Cross-fade between two inputs using the same curve for both sides."""
    _positive("acrossfade", "d", duration)
    if duration > 60:
        raise FilterError(f"acrossfade: d must be <= 60, got {duration}")
    if curve not in CROSSFADE_CURVES:
        raise FilterError(f"acrossfade: unknown curve {curve!r}")
    return Filter("acrossfade", (
        ("d", format_number(duration)),
        ("o", "1" if overlap else "0"),
        ("c1", curve),
        ("c2", curve),
    ))


def loudnorm() -> Filter:
    """EBU R128 loudness normalization with engine defaults."""
    return Filter("loudnorm")


def bass(gain: float, frequency: float, width: float) -> Filter:
    """Low-shelf boost: gain in dB at center frequency with width."""
    _within("bass", "g", gain, -900, 900)
    _positive("bass", "f", frequency)
    _positive("bass", "w", width)
    return Filter("bass", (
        ("g", format_number(gain)),
        ("f", format_number(frequency)),
        ("w", format_number(width)),
    ))


def asplit(outputs: int = 2) -> Filter:
    if outputs < 2:
        raise FilterError("asplit: needs at least two outputs")
    return Filter("asplit", positional=(str(outputs),))


def atrim(start: float | None = None, end: float | None = None) -> Filter:
    """Keep [start, end) of the input, in seconds."""
    if start is None and end is None:
        raise FilterError("atrim: start or end is required")
    options = []
    if start is not None:
        if start < 0:
            raise FilterError(f"atrim: start must be >= 0, got {start}")
        options.append(("start", format_number(start)))
    if end is not None:
        _positive("atrim", "end", end)
        options.append(("end", format_number(end)))
    return Filter("atrim", tuple(options))


def asetpts(expression: str = "PTS-STARTPTS") -> Filter:
    if not expression:
        raise FilterError("asetpts: expression is required")
    return Filter("asetpts", positional=(expression,))
