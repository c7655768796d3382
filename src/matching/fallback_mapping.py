"""
Hard-coded morphology mapping.

Snapshot of the catalog summary, served when the catalog cannot be read
for mapping purposes. Ranges are (min, max); the scalar summaries
(bmi_range, height_range...) span every archetype of the gender.
"""

from typing import Dict, Tuple


Range = Tuple[float, float]

_LEVELS_MASCULINE = ["Émacié", "Mince", "Normal", "Obèse", "Obèse morbide", "Obèse sévère", "Surpoids"]
_LEVELS_FEMININE = ["Émacié", "Normal", "Obèse", "Obèse morbide", "Obèse sévère", "Surpoids"]
_OBESITY = ["Non obèse", "Obèse", "Obésité morbide", "Surpoids"]
_MORPHOTYPES = ["OVA", "POI", "POM", "REC", "SAB", "TRI"]

MORPH_VALUES_MASCULINE: Dict[str, Range] = {
    "bigHips": (-0.5, 1.0),
    "nipples": (0.0, 0.0),
    "assLarge": (-0.6, 1.1),
    "dollBody": (0.0, 0.7),
    "pregnant": (0.0, 0.0),
    "animeNeck": (0.0, 0.8),
    "emaciated": (-2.2, 1.5),
    "animeWaist": (-1.0, 1.0),
    "breastsSag": (-1.0, 1.3),
    "pearFigure": (-0.5, 2.0),
    "narrowWaist": (-2.0, 0.0),
    "superBreast": (-0.5, 0.0),
    "breastsSmall": (0.0, 2.0),
    "animeProportion": (0.0, 0.0),
    "bodybuilderSize": (-0.8, 1.5),
    "bodybuilderDetails": (-1.5, 2.5),
    "FaceLowerEyelashLength": (0.0, 1.0),
}

MORPH_VALUES_FEMININE: Dict[str, Range] = {
    "bigHips": (-1.0, 0.9),
    "nipples": (0.0, 0.0),
    "assLarge": (-0.8, 1.2),
    "dollBody": (0.0, 0.6),
    "pregnant": (0.0, 0.0),
    "animeNeck": (0.0, 0.0),
    "emaciated": (-2.3, 0.3),
    "animeWaist": (-0.5, 0.8),
    "breastsSag": (-0.8, 0.95),
    "pearFigure": (-0.4, 1.8),
    "narrowWaist": (-1.8, 1.0),
    "superBreast": (0.0, 0.3),
    "breastsSmall": (0.0, 1.0),
    "animeProportion": (0.0, 0.0),
    "bodybuilderSize": (-0.8, 1.2),
    "bodybuilderDetails": (-1.0, 0.8),
    "FaceLowerEyelashLength": (1.0, 1.0),
}

LIMB_MASSES_MASCULINE: Dict[str, Range] = {
    "gate": (1.0, 1.0),
    "armMass": (0.3, 1.8),
    "calfMass": (0.3, 1.75),
    "neckMass": (0.2, 1.6),
    "thighMass": (0.4, 1.95),
    "torsoMass": (0.3, 1.95),
    "forearmMass": (0.2, 1.6),
}

LIMB_MASSES_FEMININE: Dict[str, Range] = {
    "gate": (1.0, 1.0),
    "armMass": (0.862, 1.325),
    "calfMass": (0.9, 1.35),
    "neckMass": (0.889, 1.25),
    "thighMass": (0.935, 1.525),
    "torsoMass": (0.745, 1.375),
    "forearmMass": (0.759, 1.2),
}

FALLBACK_MAPPING = {
    "mapping_masculine": {
        "levels": _LEVELS_MASCULINE,
        "obesity": _OBESITY,
        "morphotypes": _MORPHOTYPES,
        "muscularity": ["Atrophié sévère", "Légèrement atrophié", "Moyen musclé", "Musclé", "Normal costaud"],
        "gender_codes": ["MAS"],
        "bmi_range": (15.9, 48.1),
        "height_range": (164.0, 191.0),
        "weight_range": (50.0, 175.0),
        "morph_index": (-0.6, 2.0),
        "muscle_index": (-0.92, 1.45),
        "abdomen_round": (-0.3, 1.0),
        "morph_values": MORPH_VALUES_MASCULINE,
        "limb_masses": LIMB_MASSES_MASCULINE,
    },
    "mapping_feminine": {
        "levels": _LEVELS_FEMININE,
        "obesity": _OBESITY,
        "morphotypes": _MORPHOTYPES,
        "muscularity": ["Atrophiée sévère", "Moins musclée", "Moyennement musclée", "Musclée", "Normal costaud"],
        "gender_codes": ["FEM"],
        "bmi_range": (16.5, 47.0),
        "height_range": (158.0, 178.0),
        "weight_range": (43.0, 140.0),
        "morph_index": (-0.16, 1.92),
        "muscle_index": (-0.79, 1.08),
        "abdomen_round": (-0.08, 0.96),
        "morph_values": MORPH_VALUES_FEMININE,
        "limb_masses": LIMB_MASSES_FEMININE,
    },
}
