from __future__ import annotations

from typing import Dict, Tuple

from gpacalc.core.errors import ConfigurationError
from gpacalc.core.preset import Preset
from gpacalc.core.subjects import (
    DisplayString as D,
    MatrixSubjectGroup,
    MaxSubjectGroup,
    chinese_subject,
    english_subject,
    ib_core_subject,
    ib_subject,
    other_subject,
)


class UnknownPresetError(KeyError):
    pass


# rows: ToK score, columns: EE score (F, D, C, B, A)
IB_CORE_MATRIX: Tuple[Tuple[float, ...], ...] = (
    (0.0, 0.0, 0.0, 0.0, 0.0),
    (0.0, 0.0, 0.0, 2.5, 4.0),
    (0.0, 0.0, 2.5, 2.5, 4.0),
    (0.0, 2.5, 2.5, 4.0, 4.5),
    (0.0, 4.0, 4.0, 4.5, 4.5),
)

G10_ELECTIVES = (
    D.of("Biology"),
    D.of("Chi Lit", "Chinese Literature"),
    D.of("Economics"),
    D.of("Geography"),
    D.of("ITCS"),
    D.of("Music"),
    D.of("VA", "Visual Arts"),
)

MODULE2_OPTIONS = (D.of("Biology"), D.of("Chemistry"), D.of("Physics"))

MODULE3_OPTIONS = (
    D.of("Accounting"),
    D.of("Business"),
    D.of("Chi History", "Chinese History"),
    D.of("Economics"),
    D.of("Human Geo", "Human Geography"),
    D.of("ITCS"),
    D.of("Psych", "Psychology"),
    D.of("Studio Art"),
    D.of("Tour Geo", "Tourism Geography"),
    D.of("US History"),
    D.of("US Overv", "US Overview"),
    D.of("West Civ", "Western Civilization"),
    D.of("World H", "World History"),
)

MODULE4_OPTIONS = (
    D.of("Business"),
    D.of("Computer", "Computer Skills"),
    D.of("E&E", "Energy & Environment"),
    D.of("Global Pers", "Global Perspectives"),
    D.of("Writing", "Creative Writing"),
)

MODULE5_OPTIONS = (
    D.of("Arts"),
    D.of("Chemistry"),
    D.of("Economics"),
    D.of("French"),
    D.of("Env. Sci", "Environmental Science"),
    D.of("Int. English", "Intensive English"),
    D.of("Japanese"),
    D.of("Singing"),
)

IB_ELECTIVES = (
    D.of("Biology"),
    D.of("Chemistry"),
    D.of("Economics"),
    D.of("ESS"),
    D.of("History"),
    D.of("ITCS"),
    D.of("Music"),
    D.of("Physics"),
    D.of("Psych", "Psychology"),
    D.of("VA", "Visual Arts"),
)


def _middle_school_presets() -> list[Preset]:
    g6 = Preset(
        id="stockshsidgrade6",
        name="Grade 6",
        subject_groups=(
            english_subject(6.5, has_ap=False),
            other_subject("Math", 6.5, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            chinese_subject(5, has_h_plus=False, middle_level_name="S", middle_school=True),
            other_subject("Science", 2.5, has_s_plus=True, has_h=False, has_al=False, has_ap=False),
            other_subject("History", 2.5, has_s_plus=True, has_h=False, has_al=False, has_ap=False),
        ),
    )
    g7 = Preset(
        id="stockshsidgrade7",
        name="Grade 7",
        subject_groups=(
            english_subject(6, has_ap=False),
            other_subject("Math", 6, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            other_subject("History", 5, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            chinese_subject(5, has_h_plus=False, middle_level_name="S", middle_school=True),
            other_subject("Science", 3, has_s_plus=True, has_h=False, has_al=False, has_ap=False),
        ),
    )
    g8 = Preset(
        id="stockshsidgrade8",
        name="Grade 8",
        subject_groups=(
            english_subject(6, has_ap=False),
            other_subject("Math", 6, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            other_subject("Geography", 5, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            chinese_subject(5, has_h_plus=False, middle_level_name="S/5-7", middle_school=True),
            other_subject("Biology", 3, has_s_plus=False, has_h=True, has_al=False, has_ap=False),
            other_subject("Physics", 2.5, has_s_plus=False, has_h=True, has_al=False, has_ap=False),
        ),
    )
    return [g6, g7, g8]


def _lower_high_school_presets() -> list[Preset]:
    g9 = Preset(
        id="stockshsidgrade9",
        name="Grade 9",
        subject_groups=(
            english_subject(6.5, has_ap=False),
            other_subject("Math", 6, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            other_subject("History", 4, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            other_subject("Chemistry", 3, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            chinese_subject(3, has_h_plus=False, middle_level_name="S/5-7", middle_school=False),
            other_subject(
                "Elective",
                3,
                alternate_names=(D.of("Biology"), D.of("Geography"), D.of("ITCS")),
                has_s_plus=False,
                has_h=True,
                has_al=False,
                has_ap=False,
            ),
            other_subject("Physics", 3, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
        ),
    )
    g10 = Preset(
        id="stockshsidgrade10",
        name="Grade 10",
        subject_groups=(
            other_subject("Math", 5.5, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            english_subject(5.5, has_ap=True),
            other_subject("History", 4, has_s_plus=True, has_h=True, has_al=False, has_ap=True, ap_weight=5),
            other_subject(
                "Elective 1",
                3,
                alternate_names=G10_ELECTIVES,
                has_s_plus=False,
                has_h=True,
                has_al=False,
                has_ap=True,
                ap_weight=4,
            ),
            other_subject(
                "Elective 2",
                3,
                alternate_names=G10_ELECTIVES,
                has_s_plus=False,
                has_h=True,
                has_al=False,
                has_ap=True,
                ap_weight=4,
            ),
            chinese_subject(3, has_h_plus=True, middle_level_name="S/AP/5-7", middle_school=False),
            other_subject("Chemistry", 3, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
            other_subject("Physics", 3, has_s_plus=True, has_h=True, has_al=False, has_ap=False),
        ),
    )
    return [g9, g10]


def _module_presets(grade: int) -> list[Preset]:
    math = other_subject("Math", 6, has_s_plus=False, has_h=True, has_al=True, has_ap=True)
    english = english_subject(6, has_ap=True)
    chinese = chinese_subject(3, has_h_plus=True, middle_level_name="S/5-7", middle_school=False)
    m2 = other_subject(
        "Module 2", 6, alternate_names=MODULE2_OPTIONS, has_s_plus=True, has_h=True, has_al=True, has_ap=True
    )
    m3 = other_subject(
        "Module 3",
        4.5,
        alternate_names=MODULE3_OPTIONS,
        has_s_plus=True,
        has_h=True,
        has_al=True,
        has_ap=True,
        al_weight=6,
    )
    m45 = other_subject(
        "Module 4/5",
        3,
        alternate_names=MODULE4_OPTIONS + MODULE5_OPTIONS,
        has_s_plus=True,
        has_h=True,
        has_al=True,
        has_ap=True,
        al_weight=6,
        ap_weight=4.5,
    )
    m4 = other_subject(
        "Module 4", 3, alternate_names=MODULE4_OPTIONS, has_s_plus=True, has_h=True, has_al=False, has_ap=False
    )
    m5 = other_subject(
        "Module 5",
        3,
        alternate_names=MODULE5_OPTIONS,
        has_s_plus=True,
        has_h=True,
        has_al=True,
        has_ap=True,
        al_weight=6.0,
        ap_weight=4.5,
    )

    prefix = f"stockshsidgrade{grade}"
    name = f"Grade {grade}"
    return [
        Preset(
            id=f"{prefix}-2m2-1m3",
            name=name,
            subtitle="2x M2s, 1x M3",
            subject_groups=(math, english, m2, m2, m3, chinese),
        ),
        Preset(
            id=f"{prefix}-1m2-1m3-1m45",
            name=name,
            subtitle="1x M2, M3, M4/5",
            subject_groups=(math, english, m2, m3, m45, chinese),
        ),
        Preset(
            id=f"{prefix}-1m2-1m3-1m4-1m5",
            name=name,
            subtitle="1x M2, M3, M4, M5",
            subject_groups=(math, english, m2, m3, MaxSubjectGroup((m4, m5)), chinese),
        ),
    ]


def _ib_preset(preset_id: str, name: str, subtitle: str, with_ee: bool) -> Preset:
    groups = [
        ib_subject("Math"),
        ib_subject("English"),
        ib_subject("Chinese"),
        ib_subject("Elective 1", IB_ELECTIVES),
        ib_subject("Elective 2", IB_ELECTIVES),
        ib_subject("Elective 3", IB_ELECTIVES),
    ]
    if with_ee:
        groups.append(MatrixSubjectGroup(IB_CORE_MATRIX, (ib_core_subject("ToK"), ib_core_subject("EE"))))
    else:
        groups.append(ib_core_subject("ToK"))
    return Preset(
        id=preset_id,
        name=name,
        subtitle=subtitle,
        use_compact_level_display=True,
        subject_groups=tuple(groups),
    )


def build_presets() -> Tuple[Preset, ...]:
    g11 = _module_presets(11)
    g12 = _module_presets(12)
    presets = (
        *_middle_school_presets(),
        *_lower_high_school_presets(),
        *g11,
        _ib_preset("stockshsidgrade11-ib", "Grade 11", "IB (No EE)", with_ee=False),
        _ib_preset("stockshsidgrade11-ibee", "Grade 11", "IB (With EE)", with_ee=True),
        *g12,
        _ib_preset("stockshsidgrade12-ibee", "Grade 12", "IB", with_ee=True),
    )

    seen: set[str] = set()
    for preset in presets:
        if preset.id in seen:
            raise ConfigurationError(f"Duplicate preset id: {preset.id}")
        seen.add(preset.id)
    return presets


PRESETS: Tuple[Preset, ...] = build_presets()
_BY_ID: Dict[str, int] = {preset.id: index for index, preset in enumerate(PRESETS)}


def preset_index(preset_id: str) -> int:
    try:
        return _BY_ID[preset_id]
    except KeyError as exc:
        raise UnknownPresetError(preset_id) from exc


def get_preset(preset_id: str) -> Preset:
    return PRESETS[preset_index(preset_id)]
