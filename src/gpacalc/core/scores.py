from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class NameMode(str, Enum):
    PERCENTAGE = "Percentage"
    LETTER = "Letter"


@dataclass(frozen=True)
class ScoreEntry:
    percentage_label: str
    letter_label: str
    base_gpa: float

    def label(self, mode: NameMode) -> str:
        if mode is NameMode.LETTER:
            return self.letter_label
        return self.percentage_label


ScoreTable = Tuple[ScoreEntry, ...]


DEFAULT_SCORE_TABLE: ScoreTable = (
    ScoreEntry("0", "F", 0.0),
    ScoreEntry("60", "C/C-", 2.6),
    ScoreEntry("68", "C+", 3.0),
    ScoreEntry("73", "B-", 3.3),
    ScoreEntry("78", "B", 3.6),
    ScoreEntry("83", "B+", 3.9),
    ScoreEntry("88", "A-", 4.2),
    ScoreEntry("93", "A/A+", 4.5),
)

# IB grades carry the high/low band in the percentage slot.
IB_SCORE_TABLE: ScoreTable = (
    ScoreEntry("F", "F", 0.0),
    ScoreEntry("H4", "C/C-", 2.6),
    ScoreEntry("L5", "C+", 3.0),
    ScoreEntry("H5", "B-", 3.3),
    ScoreEntry("L6", "B", 3.6),
    ScoreEntry("H6", "B+", 3.9),
    ScoreEntry("L7", "A-", 4.2),
    ScoreEntry("H7", "A/A+", 4.5),
)

# ToK and EE
IB_CORE_SCORE_TABLE: ScoreTable = (
    ScoreEntry("F", "F", 0.0),
    ScoreEntry("D", "D", 0.0),
    ScoreEntry("C", "C", 2.5),
    ScoreEntry("B", "B", 4.0),
    ScoreEntry("A", "A", 4.5),
)


def score_labels(table: ScoreTable, mode: NameMode) -> list[str]:
    return [entry.label(mode) for entry in table]
