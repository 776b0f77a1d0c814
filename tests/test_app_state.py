import os
import tempfile
import unittest
from unittest.mock import patch

from gpacalc.config.presets import UnknownPresetError
from gpacalc.config.settings import Settings
from gpacalc.core.errors import SelectionOutOfRange
from gpacalc.core.scores import NameMode
from gpacalc.core.subjects import UserSelection
from gpacalc.services import preferences_service
from gpacalc.services.preferences_service import (
    PRESET_ID_KEY,
    SAVE_VERSION,
    SAVE_VERSION_KEY,
    PreferencesStore,
    course_key,
)
from gpacalc.state.app_state import AppState


class AppStateTests(unittest.TestCase):
    def setUp(self):
        self.store = PreferencesStore(":memory:")
        self.state = AppState(default_preset_id="stockshsidgrade10", name_mode=NameMode.PERCENTAGE)

    def tearDown(self):
        self.store.close()

    def test_defaults(self):
        self.assertEqual(self.state.current_preset.id, "stockshsidgrade10")
        self.assertEqual(len(self.state.current_selections), len(self.state.current_preset.subjects))
        self.assertEqual(self.state.current_gpa(), "0.000")

    def test_save_and_load_round_trip(self):
        self.state.set_selection(0, 2, 7)
        self.state.set_name_choice(3, 1)
        self.state.select_preset("stockshsidgrade6")
        self.state.set_selection(1, 1, 4)
        self.state.name_mode = NameMode.LETTER
        self.state.save(self.store)

        restored = AppState(default_preset_id="stockshsidgrade10")
        restored.load(self.store)
        self.assertEqual(restored.current_preset.id, "stockshsidgrade6")
        self.assertEqual(restored.name_mode, NameMode.LETTER)
        self.assertEqual(restored.current_selections[1].level_index, 1)
        self.assertEqual(restored.current_selections[1].score_index, 4)
        restored.select_preset("stockshsidgrade10")
        self.assertEqual(restored.current_selections[0].score_index, 7)
        self.assertEqual(restored.subject_display_name(3, compact=True), "Chi Lit")
        self.assertEqual(restored.subject_display_name(3), "Chinese Literature")

    def test_version_mismatch_discards_everything(self):
        self.state.set_selection(0, 1, 3)
        self.state.save(self.store)
        self.store.set(SAVE_VERSION_KEY, 1)

        restored = AppState(default_preset_id="stockshsidgrade10")
        restored.load(self.store)
        self.assertEqual(restored.current_selections[0].score_index, 0)
        self.assertEqual(self.store.get(SAVE_VERSION_KEY), SAVE_VERSION)
        self.assertEqual(self.store.get(course_key("stockshsidgrade10", 0, "ScoreIndex")), 0)

    def test_invalid_record_resets_only_that_preset(self):
        self.state.set_selection(0, 1, 3)
        self.state.set_selection(1, 1, 2)
        self.state.select_preset("stockshsidgrade7")
        self.state.set_selection(0, 1, 5)
        self.state.save(self.store)
        self.store.set(course_key("stockshsidgrade10", 1, "ScoreIndex"), 99)

        restored = AppState(default_preset_id="stockshsidgrade10")
        restored.load(self.store)
        self.assertEqual(restored.current_preset.id, "stockshsidgrade7")
        self.assertEqual(restored.current_selections[0].score_index, 5)
        restored.select_preset("stockshsidgrade10")
        self.assertTrue(all(s.level_index == 0 and s.score_index == 0 for s in restored.current_selections))
        self.assertTrue(all(choice == -1 for choice in restored.name_choices[restored.current_index]))

    def test_name_choice_on_subject_without_alternates_is_invalid(self):
        self.state.save(self.store)
        self.store.set(course_key("stockshsidgrade10", 0, "NameChoice"), 0)
        self.store.set(course_key("stockshsidgrade10", 2, "LevelIndex"), 1)

        restored = AppState(default_preset_id="stockshsidgrade10")
        restored.load(self.store)
        self.assertEqual(restored.current_selections[2].level_index, 0)

    def test_non_integer_record_is_invalid(self):
        self.state.set_selection(0, 1, 1)
        self.state.save(self.store)
        self.store.set(course_key("stockshsidgrade10", 5, "LevelIndex"), "2")

        restored = AppState(default_preset_id="stockshsidgrade10")
        restored.load(self.store)
        self.assertEqual(restored.current_selections[0].level_index, 0)

    def test_unknown_saved_preset_keeps_default(self):
        self.state.save(self.store)
        self.store.set(PRESET_ID_KEY, "retired-preset")

        restored = AppState(default_preset_id="stockshsidgrade9")
        restored.load(self.store)
        self.assertEqual(restored.current_preset.id, "stockshsidgrade9")

    def test_fresh_store_gets_initialised(self):
        self.state.load(self.store)
        self.assertEqual(self.store.get(SAVE_VERSION_KEY), SAVE_VERSION)
        self.assertEqual(self.store.get(PRESET_ID_KEY), "stockshsidgrade10")

    def test_invalid_edits_rejected(self):
        with self.assertRaises(SelectionOutOfRange):
            self.state.set_selection(0, 9, 0)
        with self.assertRaises(SelectionOutOfRange):
            self.state.set_selection(42, 0, 0)
        with self.assertRaises(SelectionOutOfRange):
            self.state.set_name_choice(0, 0)
        with self.assertRaises(UnknownPresetError):
            self.state.select_preset("nope")

    def test_customize_options(self):
        self.state.set_name_choice(4, 2)
        options = self.state.customize_options()
        self.assertEqual([option.subject_index for option in options], [3, 4])
        self.assertEqual(options[0].chosen, -1)
        self.assertEqual(options[1].chosen, 2)
        self.assertEqual(options[1].choices[2].regular, "Economics")

    def test_stale_selections_reset_before_computing(self):
        self.state.set_selection(0, 1, 7)
        self.state.current_selections[2] = UserSelection(level_index=0, score_index=99)
        with self.assertLogs("gpacalc.state.app_state", level="WARNING"):
            self.assertEqual(self.state.current_gpa(), "0.000")
        self.assertTrue(self.state.current_preset.validate_selections(self.state.current_selections))
        self.assertEqual(self.state.current_selections[0].score_index, 0)

    def test_saved_keys_follow_key_pattern(self):
        self.state.save(self.store)
        keys = self.store.keys()
        self.assertIn(SAVE_VERSION_KEY, keys)
        self.assertIn(PRESET_ID_KEY, keys)
        self.assertIn("stockshsidgrade10-7-ScoreIndex", keys)
        self.assertIn("stockshsidgrade12-ibee-7-NameChoice", keys)
        self.assertNotIn("stockshsidgrade10-8-ScoreIndex", keys)

    def test_store_opened_from_settings(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "prefs.db")
            with patch.object(preferences_service, "settings", Settings(preferences_path=path)):
                store = PreferencesStore.from_settings()
            try:
                self.assertEqual(store.db_path, path)
                self.state.save(store)
            finally:
                store.close()

            reopened = PreferencesStore(path)
            try:
                restored = AppState(default_preset_id="stockshsidgrade9")
                restored.load(reopened)
                self.assertEqual(restored.current_preset.id, "stockshsidgrade10")
            finally:
                reopened.close()

    def test_reset_current(self):
        self.state.set_selection(0, 1, 7)
        self.assertNotEqual(self.state.current_gpa(), "0.000")
        self.state.reset_current()
        self.assertEqual(self.state.current_gpa(), "0.000")


if __name__ == "__main__":
    unittest.main()
