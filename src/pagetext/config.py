from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional


class ConfigValidationError(ValueError):
    """Raised when a :class:`TextLayoutConfig` field is out of range."""


_ENV_PREFIX = "PAGETEXT_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class TextLayoutConfig:
    """Tunables for glyph → word → line aggregation and reading order."""

    # Fraction of the previous glyph height that counts as a word gap.
    space_fraction: float = 3.0
    # Insert synthetic space words when geometry implies a gap.
    auto_space: bool = True
    # Safety valve for malformed geometry: max synthetic glyphs per gap.
    max_space_glyphs: int = 50
    # Right-to-left gaps get a single synthetic glyph regardless of width.
    rtl_single_space: bool = True
    # Drop repeated (text, rounded bounds) words within a band.
    check_duplicates: bool = False
    # Decimal places used when rounding bounds for duplicate detection.
    duplicate_round_digits: int = 0
    # Keep band order from re-clustering instead of a global top-down sort.
    preserve_columns: bool = True
    # Visibility assumed for a layer the page has not been told about.
    layers_visible_by_default: bool = True
    # A word starts a new band when its y moves more than height * ratio.
    band_tolerance_ratio: float = 0.5

    def __post_init__(self) -> None:
        if not self.space_fraction > 0:
            raise ConfigValidationError(
                f"space_fraction must be > 0, got {self.space_fraction!r}"
            )
        if int(self.max_space_glyphs) != self.max_space_glyphs or self.max_space_glyphs < 1:
            raise ConfigValidationError(
                f"max_space_glyphs must be an integer >= 1, got {self.max_space_glyphs!r}"
            )
        if (
            int(self.duplicate_round_digits) != self.duplicate_round_digits
            or self.duplicate_round_digits < 0
        ):
            raise ConfigValidationError(
                "duplicate_round_digits must be an integer >= 0, "
                f"got {self.duplicate_round_digits!r}"
            )
        if not self.band_tolerance_ratio > 0:
            raise ConfigValidationError(
                f"band_tolerance_ratio must be > 0, got {self.band_tolerance_ratio!r}"
            )

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, **overrides
    ) -> "TextLayoutConfig":
        """Build a config from ``PAGETEXT_<FIELD>`` environment variables.

        Explicit keyword *overrides* win over the environment.  Values are
        coerced to the type of the field default; unparseable values raise
        :class:`ConfigValidationError`.
        """
        environ = env if env is not None else os.environ
        values: dict = {}
        for f in fields(cls):
            raw = environ.get(_ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw, type(f.default))
        values.update(overrides)
        return cls(**values)


def _coerce(name: str, raw: str, kind: type):
    text = raw.strip()
    if kind is bool:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigValidationError(f"{name}: cannot parse boolean from {raw!r}")
    try:
        return kind(text)
    except ValueError as exc:
        raise ConfigValidationError(
            f"{name}: cannot parse {kind.__name__} from {raw!r}"
        ) from exc
