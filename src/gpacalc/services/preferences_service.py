from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from gpacalc.config.settings import settings
from gpacalc.core.subjects import Subject, UserSelection

SAVE_VERSION = 2

SAVE_VERSION_KEY = "SaveVersion"
PRESET_ID_KEY = "PresetId"
NAME_MODE_KEY = "NameMode"

NAME_CHOICE_FIELD = "NameChoice"
LEVEL_INDEX_FIELD = "LevelIndex"
SCORE_INDEX_FIELD = "ScoreIndex"


class PreferencesServiceError(Exception):
    pass


def course_key(preset_id: str, subject_index: int, field: str) -> str:
    return f"{preset_id}-{subject_index}-{field}"


class SavedCourseInput(BaseModel):
    level_index: int = Field(ge=0)
    score_index: int = Field(ge=0)
    name_choice: int = Field(default=-1, ge=-1)

    def fits(self, subject: Subject) -> bool:
        if subject.alternate_names is None:
            if self.name_choice != -1:
                return False
        elif self.name_choice >= len(subject.alternate_names):
            return False
        return subject.accepts(self.to_selection())

    def to_selection(self) -> UserSelection:
        return UserSelection(level_index=self.level_index, score_index=self.score_index)


class PreferencesStore:
    """Flat key-value preferences, one JSON value per key."""

    def __init__(self, db_path: str = ":memory:") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(db_path, check_same_thread=False)
            self.conn.execute(
                "CREATE TABLE IF NOT EXISTS preferences (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            raise PreferencesServiceError(f"Cannot open preferences at {db_path}: {exc}") from exc

    @classmethod
    def from_settings(cls) -> "PreferencesStore":
        return cls(settings.preferences_path)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = self.conn.execute("SELECT value FROM preferences WHERE key=?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PreferencesServiceError(f"Failed to read {key}: {exc}") from exc
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            return default

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> None:
        try:
            self.conn.executemany(
                """INSERT INTO preferences(key, value) VALUES(?, ?)
                   ON CONFLICT(key) DO UPDATE SET value=excluded.value""",
                [(key, json.dumps(value)) for key, value in values.items()],
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            raise PreferencesServiceError(f"Failed to write preferences: {exc}") from exc

    def keys(self) -> List[str]:
        try:
            return [row[0] for row in self.conn.execute("SELECT key FROM preferences ORDER BY key")]
        except sqlite3.Error as exc:
            raise PreferencesServiceError(f"Failed to list preferences: {exc}") from exc

    def clear(self) -> None:
        try:
            self.conn.execute("DELETE FROM preferences")
            self.conn.commit()
        except sqlite3.Error as exc:
            raise PreferencesServiceError(f"Failed to clear preferences: {exc}") from exc

    def close(self) -> None:
        self.conn.close()

    def read_course_input(self, preset_id: str, subject_index: int) -> Optional[SavedCourseInput]:
        """None when any field is missing or not a valid value."""
        raw = {
            "level_index": self.get(course_key(preset_id, subject_index, LEVEL_INDEX_FIELD)),
            "score_index": self.get(course_key(preset_id, subject_index, SCORE_INDEX_FIELD)),
            "name_choice": self.get(course_key(preset_id, subject_index, NAME_CHOICE_FIELD)),
        }
        if any(value is None or isinstance(value, bool) for value in raw.values()):
            return None
        try:
            return SavedCourseInput.model_validate(raw, strict=True)
        except ValidationError:
            return None

    @staticmethod
    def course_values(preset_id: str, subject_index: int, saved: SavedCourseInput) -> Dict[str, int]:
        return {
            course_key(preset_id, subject_index, NAME_CHOICE_FIELD): saved.name_choice,
            course_key(preset_id, subject_index, LEVEL_INDEX_FIELD): saved.level_index,
            course_key(preset_id, subject_index, SCORE_INDEX_FIELD): saved.score_index,
        }
