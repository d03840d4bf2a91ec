"""
rainmix Configuration - Immutable render and logging settings.

Responsibilities:
- Hold every tunable render parameter with its default
- Validate ranges once, at construction
- Resolve the logging level for the CLI

Invariants:
- Configuration is frozen for the duration of a run
- A constructed RenderConfig is always within range
"""

import os
import re
from dataclasses import dataclass
from typing import Mapping


BITRATE_PATTERN = re.compile(r"^[1-9][0-9]*k$")

LOG_LEVEL_ENV = "RAINMIX_LOG_LEVEL"
LOG_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(ValueError):
    """Raised when a configuration value is outside its valid range."""
    pass


def _check_range(name: str, value: float, low: float | None, high: float | None,
                 low_inclusive: bool = True) -> None:
    if low is not None:
        below = value < low if low_inclusive else value <= low
        if below:
            bound = ">=" if low_inclusive else ">"
            raise ConfigError(f"{name} must be {bound} {low}, got {value}")
    if high is not None and value > high:
        raise ConfigError(f"{name} must be <= {high}, got {value}")


@dataclass(frozen=True)
class RenderConfig:
    """
    Tunable parameters for one render.

    Clean-up stage:
        lowpass_hz: keep highs natural; 10000-13000 is a good range
        denoise_nf: afftdn noise floor in dB (-25 stronger, -20 gentlest)
        clean_bitrate: bitrate of the cleaned intermediate

    Pink-noise bed:
        pink_weight: 0.2 subtle, 0.3 natural, 0.4 thick

    Room feel (very gentle echo for patio reflections):
        echo_on, echo_in_gain, echo_out_gain, echo_delay_ms, echo_decay

    Loop splice:
        xfade_seconds: 2-5 s triangular crossfade end -> start

    Final loudness + codec:
        final_bitrate, sample_rate (kept consistent across outputs)

    Phone mix (narrower band, kinder to tiny drivers):
        phone_lowpass_hz, phone_highpass_hz, phone_bitrate

    Sub/room mix (mild bass lift):
        bass_gain_db (try 3-8), bass_freq_hz (center), bass_width
        (higher = wider), room_lowpass_hz

    Distant storm undertone:
        rumble_on, rumble_freq_hz (felt, not heard), rumble_level
        (0.01-0.03 is subtle), rumble_weight (mix level vs rain track)
    """

    lowpass_hz: int = 12000
    denoise_nf: float = -20
    clean_bitrate: str = "256k"

    pink_weight: float = 0.30

    echo_on: bool = True
    echo_in_gain: float = 0.6
    echo_out_gain: float = 0.8
    echo_delay_ms: float = 120
    echo_decay: float = 0.3

    xfade_seconds: float = 3

    final_bitrate: str = "256k"
    sample_rate: int = 44100

    phone_lowpass_hz: int = 9000
    phone_highpass_hz: int = 200
    phone_bitrate: str = "160k"

    bass_gain_db: float = 6
    bass_freq_hz: float = 80
    bass_width: float = 1.5
    room_lowpass_hz: int = 12000

    rumble_on: bool = False
    rumble_freq_hz: float = 40
    rumble_level: float = 0.02
    rumble_weight: float = 0.30

    def __post_init__(self) -> None:
        if not isinstance(self.sample_rate, int) or self.sample_rate <= 0:
            raise ConfigError(f"sample_rate must be a positive integer, got {self.sample_rate!r}")
        nyquist = self.sample_rate / 2

        for name in ("clean_bitrate", "final_bitrate", "phone_bitrate"):
            value = getattr(self, name)
            if not isinstance(value, str) or not BITRATE_PATTERN.match(value):
                raise ConfigError(f"{name} must look like '256k', got {value!r}")

        for name in ("echo_on", "rumble_on"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a bool")

        for name in ("lowpass_hz", "phone_lowpass_hz", "phone_highpass_hz", "room_lowpass_hz"):
            _check_range(name, getattr(self, name), 0, nyquist, low_inclusive=False)
        if self.phone_highpass_hz >= self.phone_lowpass_hz:
            raise ConfigError("phone_highpass_hz must be below phone_lowpass_hz")

        _check_range("denoise_nf", self.denoise_nf, -80, -20)
        _check_range("pink_weight", self.pink_weight, 0, 1)
        _check_range("echo_in_gain", self.echo_in_gain, 0, 1, low_inclusive=False)
        _check_range("echo_out_gain", self.echo_out_gain, 0, 1, low_inclusive=False)
        _check_range("echo_delay_ms", self.echo_delay_ms, 0, 90000, low_inclusive=False)
        _check_range("echo_decay", self.echo_decay, 0, 1, low_inclusive=False)
        _check_range("xfade_seconds", self.xfade_seconds, 0, 60, low_inclusive=False)
        _check_range("bass_gain_db", self.bass_gain_db, -20, 20)
        _check_range("bass_freq_hz", self.bass_freq_hz, 0, nyquist, low_inclusive=False)
        _check_range("bass_width", self.bass_width, 0, None, low_inclusive=False)
        _check_range("rumble_freq_hz", self.rumble_freq_hz, 0, nyquist, low_inclusive=False)
        _check_range("rumble_level", self.rumble_level, 0, 1)
        _check_range("rumble_weight", self.rumble_weight, 0, 1)


@dataclass(frozen=True)
class LoggingConfig:
    """Default logging configuration for the CLI."""

    level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LoggingConfig":
        """Read the level from RAINMIX_LOG_LEVEL; unknown names keep the default."""
        environ = os.environ if environ is None else environ
        level = environ.get(LOG_LEVEL_ENV, "").strip().upper()
        if level in LOG_LEVEL_NAMES:
            return cls(level=level)
        return cls()
