from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from gpacalc.core.errors import ConfigurationError, SelectionOutOfRange
from gpacalc.core.gpa import compute_gpa
from gpacalc.core.subjects import Subject, SubjectGroup, UserSelection


@dataclass(frozen=True)
class Preset:
    """
    One grading track. `subjects` is the flattened subject list of every group
    and is the index space for selection arrays.
    """

    id: str
    name: str
    subject_groups: Tuple[SubjectGroup, ...]
    subtitle: Optional[str] = None
    use_compact_level_display: bool = False
    subjects: Tuple[Subject, ...] = field(init=False)

    def __post_init__(self) -> None:
        if not self.subject_groups:
            raise ConfigurationError(f"Preset {self.id!r} has no subject groups")
        subjects = tuple(s for group in self.subject_groups for s in group.flatten_subjects())
        object.__setattr__(self, "subject_groups", tuple(self.subject_groups))
        object.__setattr__(self, "subjects", subjects)
        if self.subtitle is None:
            object.__setattr__(self, "subtitle", f"{len(subjects)} subjects")

    def default_selections(self) -> list[UserSelection]:
        return [UserSelection() for _ in self.subjects]

    def validate_selections(self, selections: Sequence[UserSelection]) -> bool:
        if len(selections) != len(self.subjects):
            return False
        return all(subject.accepts(sel) for subject, sel in zip(self.subjects, selections))

    def compute_gpa(self, selections: Sequence[UserSelection]) -> float:
        if len(selections) != len(self.subjects):
            raise SelectionOutOfRange(
                f"Preset {self.id!r} needs {len(self.subjects)} selections, got {len(selections)}"
            )
        return compute_gpa(self, selections)

    def gpa_bounds(self) -> Tuple[float, float]:
        ranges = [group.value_range() for group in self.subject_groups]
        return min(low for low, _ in ranges), max(high for _, high in ranges)
