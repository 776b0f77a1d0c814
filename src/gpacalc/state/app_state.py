from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from gpacalc.config.presets import PRESETS, UnknownPresetError
from gpacalc.config.settings import settings
from gpacalc.core.errors import SelectionOutOfRange
from gpacalc.core.gpa import format_gpa
from gpacalc.core.preset import Preset
from gpacalc.core.scores import NameMode
from gpacalc.core.subjects import DisplayString, UserSelection
from gpacalc.services.preferences_service import (
    NAME_MODE_KEY,
    PRESET_ID_KEY,
    SAVE_VERSION,
    SAVE_VERSION_KEY,
    PreferencesStore,
    SavedCourseInput,
)

logger = logging.getLogger(__name__)

DEFAULT_NAME_CHOICE = -1


def parse_name_mode(value: Optional[str]) -> NameMode:
    return NameMode.LETTER if value == NameMode.LETTER.value else NameMode.PERCENTAGE


@dataclass(frozen=True)
class PresetOption:
    """A subject of the current preset whose display name can be swapped."""

    subject_index: int
    name: DisplayString
    choices: Tuple[DisplayString, ...]
    chosen: int = DEFAULT_NAME_CHOICE


class AppState:
    def __init__(
        self,
        presets: Sequence[Preset] = PRESETS,
        default_preset_id: Optional[str] = None,
        name_mode: Optional[NameMode] = None,
    ) -> None:
        self.presets = tuple(presets)
        self.current_index = self._index_of(default_preset_id or settings.default_preset_id)
        self.name_mode = name_mode or parse_name_mode(settings.name_mode)
        self.selections: List[List[UserSelection]] = [p.default_selections() for p in self.presets]
        self.name_choices: List[List[int]] = [[DEFAULT_NAME_CHOICE] * len(p.subjects) for p in self.presets]

    def _index_of(self, preset_id: str) -> int:
        for index, preset in enumerate(self.presets):
            if preset.id == preset_id:
                return index
        raise UnknownPresetError(preset_id)

    @property
    def current_preset(self) -> Preset:
        return self.presets[self.current_index]

    @property
    def current_selections(self) -> List[UserSelection]:
        return self.selections[self.current_index]

    def select_preset(self, preset_id: str) -> Preset:
        self.current_index = self._index_of(preset_id)
        return self.current_preset

    def set_selection(self, subject_index: int, level_index: int, score_index: int) -> None:
        subject = self._subject(subject_index)
        selection = UserSelection(level_index=level_index, score_index=score_index)
        if not subject.accepts(selection):
            raise SelectionOutOfRange(
                f"Selection ({level_index}, {score_index}) is out of range for {subject.name.regular}"
            )
        self.current_selections[subject_index] = selection

    def set_name_choice(self, subject_index: int, choice: int) -> None:
        subject = self._subject(subject_index)
        choices = subject.alternate_names or ()
        if choice != DEFAULT_NAME_CHOICE and not 0 <= choice < len(choices):
            raise SelectionOutOfRange(f"Name choice {choice} is out of range for {subject.name.regular}")
        self.name_choices[self.current_index][subject_index] = choice

    def _subject(self, subject_index: int):
        subjects = self.current_preset.subjects
        if not 0 <= subject_index < len(subjects):
            raise SelectionOutOfRange(f"Subject index {subject_index} out of range (0..{len(subjects) - 1})")
        return subjects[subject_index]

    def reset_preset(self, index: int) -> None:
        preset = self.presets[index]
        self.selections[index] = preset.default_selections()
        self.name_choices[index] = [DEFAULT_NAME_CHOICE] * len(preset.subjects)

    def reset_current(self) -> None:
        self.selections[self.current_index] = self.current_preset.default_selections()

    def current_gpa(self) -> str:
        preset = self.current_preset
        if not preset.validate_selections(self.current_selections):
            logger.warning("Selections for %s no longer fit the preset, resetting", preset.id)
            self.reset_preset(self.current_index)
        return format_gpa(preset.compute_gpa(self.current_selections))

    def subject_display_name(self, subject_index: int, compact: bool = False) -> str:
        subject = self._subject(subject_index)
        choice = self.name_choices[self.current_index][subject_index]
        if choice == DEFAULT_NAME_CHOICE or not subject.alternate_names:
            return subject.name.for_size(compact)
        return subject.alternate_names[choice].for_size(compact)

    def customize_options(self) -> List[PresetOption]:
        choices = self.name_choices[self.current_index]
        return [
            PresetOption(index, subject.name, subject.alternate_names, choices[index])
            for index, subject in enumerate(self.current_preset.subjects)
            if subject.alternate_names is not None
        ]

    def save(self, store: PreferencesStore) -> None:
        values = {
            SAVE_VERSION_KEY: SAVE_VERSION,
            PRESET_ID_KEY: self.current_preset.id,
            NAME_MODE_KEY: self.name_mode.value,
        }
        for i, preset in enumerate(self.presets):
            for j, selection in enumerate(self.selections[i]):
                saved = SavedCourseInput(
                    level_index=selection.level_index,
                    score_index=selection.score_index,
                    name_choice=self.name_choices[i][j],
                )
                values.update(store.course_values(preset.id, j, saved))
        store.set_many(values)

    def load(self, store: PreferencesStore) -> None:
        version = store.get(SAVE_VERSION_KEY)
        if version is None:
            logger.info("No saved preferences, starting from defaults")
            self.save(store)
            return
        if version != SAVE_VERSION:
            logger.warning("Discarding preferences saved with version %s (expected %s)", version, SAVE_VERSION)
            store.clear()
            self.save(store)
            return

        self.name_mode = parse_name_mode(store.get(NAME_MODE_KEY))
        saved_preset = store.get(PRESET_ID_KEY)
        if any(preset.id == saved_preset for preset in self.presets):
            self.current_index = self._index_of(saved_preset)
        else:
            logger.warning("Saved preset %r is not in the catalog, keeping %s", saved_preset, self.current_preset.id)

        for index in range(len(self.presets)):
            self._restore_preset(store, index)
        self.save(store)

    def _restore_preset(self, store: PreferencesStore, index: int) -> None:
        preset = self.presets[index]
        selections: List[UserSelection] = []
        name_choices: List[int] = []
        for j, subject in enumerate(preset.subjects):
            saved = store.read_course_input(preset.id, j)
            if saved is None or not saved.fits(subject):
                logger.warning("Saved input for %s subject %d is invalid, resetting preset", preset.id, j)
                self.reset_preset(index)
                return
            selections.append(saved.to_selection())
            name_choices.append(saved.name_choice)
        self.selections[index] = selections
        self.name_choices[index] = name_choices
