from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

from gpacalc.core.errors import ConfigurationError, SelectionOutOfRange
from gpacalc.core.scores import (
    DEFAULT_SCORE_TABLE,
    IB_CORE_SCORE_TABLE,
    IB_SCORE_TABLE,
    ScoreTable,
)

TIE_TOLERANCE = 1e-6


def is_close(a: float, b: float) -> bool:
    return abs(a - b) < TIE_TOLERANCE


@dataclass(frozen=True)
class Level:
    name: str
    weight: float
    offset: float


@dataclass(frozen=True)
class DisplayString:
    compact: str
    regular: str

    @classmethod
    def of(cls, compact: str, regular: Optional[str] = None) -> "DisplayString":
        return cls(compact, regular if regular is not None else compact)

    def for_size(self, compact: bool) -> str:
        return self.compact if compact else self.regular


@dataclass(frozen=True)
class Contribution:
    value: float
    weight: float

    @property
    def weighted_value(self) -> float:
        return self.value * self.weight


@dataclass
class UserSelection:
    level_index: int = 0
    score_index: int = 0


class SubjectGroup(Protocol):
    def flatten_subjects(self) -> list["Subject"]:
        ...

    def value_range(self) -> Tuple[float, float]:
        ...

    def compute_contribution(self, selections: Sequence[UserSelection]) -> Contribution:
        ...


def _checked(index: int, size: int, what: str) -> int:
    if not 0 <= index < size:
        raise SelectionOutOfRange(f"{what} index {index} out of range (0..{size - 1})")
    return index


def _require_slots(selections: Sequence[UserSelection], count: int) -> None:
    if len(selections) < count:
        raise SelectionOutOfRange(f"Expected {count} selection(s), got {len(selections)}")


@dataclass(frozen=True)
class Subject:
    """A single course; also usable directly as a one-slot subject group."""

    name: DisplayString
    levels: Tuple[Level, ...]
    score_table: ScoreTable
    alternate_names: Optional[Tuple[DisplayString, ...]] = None

    def __post_init__(self) -> None:
        if not self.levels:
            raise ConfigurationError(f"Subject {self.name.regular!r} has no levels")
        if not self.score_table:
            raise ConfigurationError(f"Subject {self.name.regular!r} has an empty score table")
        for level in self.levels:
            if level.weight <= 0:
                raise ConfigurationError(
                    f"Level {level.name!r} of {self.name.regular!r} must have a positive weight"
                )

    def level_names(self) -> list[str]:
        return [level.name for level in self.levels]

    def accepts(self, selection: UserSelection) -> bool:
        return (
            0 <= selection.level_index < len(self.levels)
            and 0 <= selection.score_index < len(self.score_table)
        )

    def flatten_subjects(self) -> list["Subject"]:
        return [self]

    def value_range(self) -> Tuple[float, float]:
        values = [
            max(entry.base_gpa + level.offset, 0.0) for level in self.levels for entry in self.score_table
        ]
        return min(values), max(values)

    def compute_single(self, selection: UserSelection) -> Contribution:
        level = self.levels[_checked(selection.level_index, len(self.levels), "Level")]
        entry = self.score_table[_checked(selection.score_index, len(self.score_table), "Score")]
        # No course can pull the GPA below zero.
        return Contribution(value=max(entry.base_gpa + level.offset, 0.0), weight=level.weight)

    def compute_contribution(self, selections: Sequence[UserSelection]) -> Contribution:
        _require_slots(selections, 1)
        return self.compute_single(selections[0])


@dataclass(frozen=True)
class MaxSubjectGroup:
    """Best of N: only the subject with the highest weighted value counts."""

    subjects: Tuple[Subject, ...]

    def __post_init__(self) -> None:
        if not self.subjects:
            raise ConfigurationError("MaxSubjectGroup needs at least one subject")

    def flatten_subjects(self) -> list[Subject]:
        return list(self.subjects)

    def value_range(self) -> Tuple[float, float]:
        ranges = [subject.value_range() for subject in self.subjects]
        return min(low for low, _ in ranges), max(high for _, high in ranges)

    def compute_contribution(self, selections: Sequence[UserSelection]) -> Contribution:
        _require_slots(selections, len(self.subjects))
        best = self.subjects[0].compute_single(selections[0])
        for subject, selection in zip(self.subjects[1:], selections[1:]):
            candidate = subject.compute_single(selection)
            if not is_close(best.weighted_value, candidate.weighted_value) and (
                candidate.weighted_value > best.weighted_value
            ):
                best = candidate
        return best


@dataclass(frozen=True)
class MatrixSubjectGroup:
    """
    Two subjects graded jointly: the value is matrix[score_a][score_b].
    Levels are ignored; the first level of the first subject supplies the weight.
    """

    matrix: Tuple[Tuple[float, ...], ...]
    subjects: Tuple[Subject, Subject]

    def __post_init__(self) -> None:
        if len(self.subjects) != 2:
            raise ConfigurationError("MatrixSubjectGroup needs exactly two subjects")
        first, second = self.subjects
        rows, cols = len(first.score_table), len(second.score_table)
        if len(self.matrix) != rows or any(len(row) != cols for row in self.matrix):
            raise ConfigurationError(
                f"Matrix for {first.name.regular}/{second.name.regular} must be {rows}x{cols}"
            )

    def flatten_subjects(self) -> list[Subject]:
        return list(self.subjects)

    def value_range(self) -> Tuple[float, float]:
        values = [value for row in self.matrix for value in row]
        return min(values), max(values)

    def compute_contribution(self, selections: Sequence[UserSelection]) -> Contribution:
        _require_slots(selections, 2)
        row = _checked(selections[0].score_index, len(self.matrix), "Score")
        col = _checked(selections[1].score_index, len(self.matrix[row]), "Score")
        return Contribution(value=self.matrix[row][col], weight=self.subjects[0].levels[0].weight)


def _names(names: Optional[Sequence[DisplayString]]) -> Optional[Tuple[DisplayString, ...]]:
    return tuple(names) if names is not None else None


def _display(name) -> DisplayString:
    return name if isinstance(name, DisplayString) else DisplayString.of(name)


def ib_subject(name, alternate_names: Optional[Sequence[DisplayString]] = None) -> Subject:
    return Subject(
        name=_display(name),
        alternate_names=_names(alternate_names),
        levels=(Level("IB", 1.0, 0.0),),
        score_table=IB_SCORE_TABLE,
    )


def ib_core_subject(name: str) -> Subject:
    return Subject(
        name=_display(name),
        levels=(Level("IB", 0.5, 0.0),),
        score_table=IB_CORE_SCORE_TABLE,
    )


def english_subject(weight: float, *, has_ap: bool) -> Subject:
    levels = [
        Level("S", weight, -0.5),
        Level("S+", weight, -0.4),
        Level("H", weight, -0.2),
        Level("H+", weight, -0.1),
    ]
    if has_ap:
        levels.append(Level("AP", weight, 0.0))
    return Subject(name=DisplayString.of("English"), levels=tuple(levels), score_table=DEFAULT_SCORE_TABLE)


def chinese_subject(
    weight: float,
    *,
    has_h_plus: bool,
    middle_level_name: str,
    middle_school: bool,
) -> Subject:
    # middle school Chinese sits 0.1 higher on every level
    shift = 0.1 if middle_school else 0.0
    levels = [
        Level("1-2", weight, round(-0.5 + shift, 2)),
        Level("3-4", weight, round(-0.4 + shift, 2)),
        Level(middle_level_name, weight, round(-0.3 + shift, 2)),
        Level("H", weight, round(-0.2 + shift, 2)),
    ]
    if has_h_plus:
        levels.append(Level("H+", weight, round(-0.1 + shift, 2)))
    return Subject(name=DisplayString.of("Chinese"), levels=tuple(levels), score_table=DEFAULT_SCORE_TABLE)


def other_subject(
    name,
    weight: float,
    *,
    alternate_names: Optional[Sequence[DisplayString]] = None,
    has_s_plus: bool,
    has_h: bool,
    has_al: bool,
    has_ap: bool,
    al_weight: Optional[float] = None,
    ap_weight: Optional[float] = None,
) -> Subject:
    levels = [Level("S", weight, -0.5)]
    if has_s_plus:
        levels.append(Level("S+", weight, -0.35))
    if has_h:
        levels.append(Level("H", weight, -0.2))
    if has_al:
        levels.append(Level("A-L", al_weight if al_weight is not None else weight, 0.0))
    if has_ap:
        levels.append(Level("AP", ap_weight if ap_weight is not None else weight, 0.0))
    return Subject(
        name=_display(name),
        alternate_names=_names(alternate_names),
        levels=tuple(levels),
        score_table=DEFAULT_SCORE_TABLE,
    )
