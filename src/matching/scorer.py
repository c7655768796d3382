"""
ArchetypeScorer -- weighted multi-criteria archetype scoring.

Two numbers per candidate:

- ``overall_score`` (reward, higher is better, in [0, 1]) drives ranking:

    0.30 * bmi_compatibility      1 - |bmi - center| / half_width, floored at 0
  + 0.25 * morph_similarity       1 - |d morph_index| / 0.5, floored at 0
  + 0.25 * muscle_similarity      1 - |d muscle_index| / 1.0, floored at 0
  + 0.20 * semantic_match         share of obesity/muscularity/level/morphotype
                                  that match exactly

- ``distance`` (penalty, lower is closer) is diagnostic only:

    0.4 * |d morph_index| + 0.35 * |d muscle_index| + 0.25 * bmi_distance

The two use different weights and directions and are not expected to
agree. A zero-width BMI range uses 1 as its half width.

Usage::

    scorer = ArchetypeScorer()
    score = scorer.overall_score(archetype, profile, canonical_muscularity="Musclé")
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from config.constants import SEMANTIC_FIELDS
from matching.models import Archetype, SemanticProfile


@dataclass(frozen=True)
class ScoringWeights:
    """Weights and normalizers for overall_score and distance."""

    # overall_score
    bmi_compatibility: float = 0.30
    morph_similarity: float = 0.25
    muscle_similarity: float = 0.25
    semantic_match: float = 0.20

    # Typical maximum expected index differences (not hard bounds)
    morph_index_scale: float = 0.5
    muscle_index_scale: float = 1.0

    # distance
    distance_morph: float = 0.40
    distance_muscle: float = 0.35
    distance_bmi: float = 0.25


def bmi_distance(archetype: Archetype, bmi: float) -> float:
    """
    Distance of ``bmi`` from the range center, in half-widths.

    0.0 when the archetype has no usable range.
    """
    if archetype.bmi_range is None:
        return 0.0
    min_bmi, max_bmi = archetype.bmi_range
    center = (min_bmi + max_bmi) / 2
    half_width = (max_bmi - min_bmi) / 2 or 1.0
    return abs(bmi - center) / half_width


def semantic_match_fraction(
    archetype: Archetype,
    profile: SemanticProfile,
    canonical_muscularity: Optional[str] = None,
) -> float:
    """
    Fraction of the four semantic fields that match exactly.

    Muscularity is compared in canonical form when one is given, since
    catalog labels are canonical. A label missing on either side is a
    miss.
    """
    matches = 0
    for name in SEMANTIC_FIELDS:
        expected = getattr(profile, name)
        if name == "muscularity" and canonical_muscularity is not None:
            expected = canonical_muscularity
        actual = getattr(archetype, name)
        if expected is not None and actual is not None and expected == actual:
            matches += 1
    return matches / len(SEMANTIC_FIELDS)


def semantic_coherence(
    archetypes: Sequence[Archetype],
    profile: SemanticProfile,
    canonical_muscularity: Optional[str] = None,
) -> float:
    """Mean semantic match fraction over a selection (0.0 when empty)."""
    if not archetypes:
        return 0.0
    total = sum(
        semantic_match_fraction(a, profile, canonical_muscularity) for a in archetypes
    )
    return total / len(archetypes)


class ArchetypeScorer:
    """Computes overall_score and distance for catalog archetypes."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    # ── sub-scores ────────────────────────────────────────────────

    def bmi_compatibility(self, archetype: Archetype, profile: SemanticProfile) -> float:
        if archetype.bmi_range is None:
            return 0.0
        distance = bmi_distance(archetype, profile.estimated_bmi)
        if not math.isfinite(distance):
            return 0.0
        return max(0.0, 1.0 - distance)

    def morph_similarity(self, archetype: Archetype, profile: SemanticProfile) -> float:
        diff = abs(archetype.morph_index - profile.morph_index)
        return max(0.0, 1.0 - diff / self.weights.morph_index_scale)

    def muscle_similarity(self, archetype: Archetype, profile: SemanticProfile) -> float:
        diff = abs(archetype.muscle_index - profile.muscle_index)
        return max(0.0, 1.0 - diff / self.weights.muscle_index_scale)

    # ── aggregates ────────────────────────────────────────────────

    def overall_score(
        self,
        archetype: Archetype,
        profile: SemanticProfile,
        canonical_muscularity: Optional[str] = None,
    ) -> float:
        w = self.weights
        return (
            w.bmi_compatibility * self.bmi_compatibility(archetype, profile)
            + w.morph_similarity * self.morph_similarity(archetype, profile)
            + w.muscle_similarity * self.muscle_similarity(archetype, profile)
            + w.semantic_match * semantic_match_fraction(archetype, profile, canonical_muscularity)
        )

    def distance(self, archetype: Archetype, profile: SemanticProfile) -> float:
        w = self.weights
        return (
            w.distance_morph * abs(archetype.morph_index - profile.morph_index)
            + w.distance_muscle * abs(archetype.muscle_index - profile.muscle_index)
            + w.distance_bmi * bmi_distance(archetype, profile.estimated_bmi)
        )
