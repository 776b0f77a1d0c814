from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Iterable, Sequence

from gpacalc.core.errors import ConfigurationError, SelectionOutOfRange
from gpacalc.core.subjects import SubjectGroup, UserSelection

if TYPE_CHECKING:
    from gpacalc.core.preset import Preset

logger = logging.getLogger(__name__)


def aggregate(groups: Iterable[SubjectGroup], selections: Sequence[UserSelection]) -> float:
    """
    Each group consumes the next len(group.flatten_subjects()) selections.
    GPA = Σ(value * weight) / Σ(weight)
    """
    weighted_sum = 0.0
    total_weight = 0.0
    cursor = 0

    for group in groups:
        width = len(group.flatten_subjects())
        part = group.compute_contribution(selections[cursor:cursor + width])
        weighted_sum += part.weighted_value
        total_weight += part.weight
        cursor += width

    if cursor != len(selections):
        raise SelectionOutOfRange(f"Expected {cursor} selections, got {len(selections)}")
    if total_weight == 0:
        raise ConfigurationError("Cannot calculate GPA with zero total weight")

    return weighted_sum / total_weight


def compute_gpa(preset: "Preset", selections: Sequence[UserSelection]) -> float:
    gpa = aggregate(preset.subject_groups, selections)
    logger.debug("Computed GPA %.6f for preset %s", gpa, preset.id)
    return gpa


def format_gpa(value: float, decimal_places: int = 3) -> str:
    """
    Fixed-point string, rounding half away from zero: 3.6 -> "3.600", 0.2 -> "0.200".

    Rounds the shortest decimal repr of the value rather than the float product
    value * 1000, so a value that prints as a tie (3.8665) always rounds up even
    when its binary expansion sits just below the tie.
    """
    if decimal_places < 1:
        raise ValueError("decimal_places must be at least 1")
    scaled = (Decimal(repr(value)) * (10 ** decimal_places)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    digits = str(abs(int(scaled))).rjust(decimal_places + 1, "0")
    sign = "-" if scaled < 0 else ""
    return f"{sign}{digits[:-decimal_places]}.{digits[-decimal_places:]}"


def parse_gpa(text: str) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Not a GPA value: {text!r}") from exc
