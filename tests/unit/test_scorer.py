"""
Tests for archetype scoring.
"""

import pytest

from matching.models import Archetype, SemanticProfile
from matching.scorer import (
    ArchetypeScorer,
    ScoringWeights,
    bmi_distance,
    semantic_coherence,
    semantic_match_fraction,
)


def _profile(**overrides):
    data = {"sex": "male", "estimated_bmi": 23.0, "morph_index": 0.0, "muscle_index": 0.0}
    data.update(overrides)
    return SemanticProfile(**data)


def _archetype(**overrides):
    data = {
        "id": "a",
        "gender": "masculine",
        "muscularity": "Musclé",
        "morph_index": 0.15,
        "muscle_index": 0.35,
        "bmi_range": (21.0, 25.0),
    }
    data.update(overrides)
    return Archetype(**data)


class TestScoringWeights:
    """Weight sanity."""

    def test_overall_weights_sum_to_one(self):
        w = ScoringWeights()
        total = w.bmi_compatibility + w.morph_similarity + w.muscle_similarity + w.semantic_match
        assert total == pytest.approx(1.0)

    def test_distance_weights_sum_to_one(self):
        w = ScoringWeights()
        assert w.distance_morph + w.distance_muscle + w.distance_bmi == pytest.approx(1.0)


class TestBmiDistance:
    """Tests for bmi_distance."""

    def test_center_is_zero(self):
        assert bmi_distance(_archetype(), 23.0) == 0.0

    def test_measured_in_half_widths(self):
        assert bmi_distance(_archetype(), 25.0) == pytest.approx(1.0)
        assert bmi_distance(_archetype(), 27.0) == pytest.approx(2.0)

    def test_zero_width_range_uses_unit_half_width(self):
        archetype = _archetype(bmi_range=(23.0, 23.0))
        assert bmi_distance(archetype, 23.0) == 0.0
        assert bmi_distance(archetype, 23.5) == pytest.approx(0.5)

    def test_missing_range_is_zero(self):
        assert bmi_distance(_archetype(bmi_range=None), 40.0) == 0.0


class TestSubScores:
    """Per-criterion similarities."""

    def setup_method(self):
        self.scorer = ArchetypeScorer()

    def test_bmi_compatibility_at_center(self):
        profile = _profile(estimated_bmi=23.0)
        assert self.scorer.bmi_compatibility(_archetype(), profile) == 1.0

    def test_bmi_compatibility_floors_at_zero(self):
        profile = _profile(estimated_bmi=40.0)
        assert self.scorer.bmi_compatibility(_archetype(), profile) == 0.0

    def test_bmi_compatibility_without_range(self):
        profile = _profile(estimated_bmi=23.0)
        assert self.scorer.bmi_compatibility(_archetype(bmi_range=None), profile) == 0.0

    def test_morph_similarity_scale(self):
        profile = _profile(morph_index=0.0)
        assert self.scorer.morph_similarity(_archetype(morph_index=0.25), profile) == pytest.approx(0.5)
        assert self.scorer.morph_similarity(_archetype(morph_index=0.8), profile) == 0.0

    def test_muscle_similarity_scale(self):
        profile = _profile(muscle_index=0.0)
        assert self.scorer.muscle_similarity(_archetype(muscle_index=-0.5), profile) == pytest.approx(0.5)
        assert self.scorer.muscle_similarity(_archetype(muscle_index=2.0), profile) == 0.0


class TestSemanticMatch:
    """Exact-match fraction and coherence."""

    def test_all_four_match(self):
        archetype = _archetype(obesity="Non obèse", level="Normal", morphotype="REC")
        profile = _profile(
            muscularity="Musclé", obesity="Non obèse", level="Normal", morphotype="REC",
        )
        assert semantic_match_fraction(archetype, profile) == 1.0

    def test_canonical_muscularity_replaces_raw_label(self):
        profile = _profile(muscularity="musclé")

        assert semantic_match_fraction(_archetype(), profile) == 0.0
        assert semantic_match_fraction(_archetype(), profile, "Musclé") == 0.25

    def test_missing_on_both_sides_is_not_a_match(self):
        archetype = _archetype(muscularity=None, obesity=None)
        profile = _profile(muscularity=None, obesity=None)

        assert semantic_match_fraction(archetype, profile) == 0.0

    def test_coherence_is_mean_fraction(self):
        profile = _profile(muscularity="Musclé", morphotype="TRI")
        archetypes = [
            _archetype(id="a", morphotype="TRI"),   # 2/4
            _archetype(id="b", morphotype="REC"),   # 1/4
            _archetype(id="c", muscularity="Normal", morphotype="REC"),  # 0/4
        ]

        assert semantic_coherence(archetypes, profile, "Musclé") == pytest.approx(0.25)

    def test_coherence_of_empty_selection(self):
        assert semantic_coherence([], _profile()) == 0.0


class TestOverallScore:
    """Weighted aggregate."""

    def test_reference_example(self):
        """bmi 23 in [21, 25], close indices, muscularity match."""
        scorer = ArchetypeScorer()
        profile = _profile(muscularity="musclé", morph_index=0.1, muscle_index=0.3)

        score = scorer.overall_score(_archetype(), profile, canonical_muscularity="Musclé")

        # 0.3 * 1 + 0.25 * 0.9 + 0.25 * 0.95 + 0.2 * 0.25
        assert score == pytest.approx(0.8125)
        assert score > 0.8

    @pytest.mark.parametrize("bmi,morph,muscle", [
        (10.0, -3.0, 5.0),
        (23.0, 0.15, 0.35),
        (60.0, 2.0, -2.0),
    ])
    def test_score_in_unit_interval(self, bmi, morph, muscle):
        scorer = ArchetypeScorer()
        profile = _profile(estimated_bmi=bmi, morph_index=morph, muscle_index=muscle)

        score = scorer.overall_score(_archetype(), profile, "Musclé")

        assert 0.0 <= score <= 1.0

    def test_exact_semantic_match_ranks_higher(self):
        scorer = ArchetypeScorer()
        profile = _profile(obesity="Non obèse", level="Normal", morphotype="REC")
        matching = _archetype(id="match", obesity="Non obèse", level="Normal", morphotype="REC")
        other = _archetype(id="other", obesity="Surpoids", level="Surpoids", morphotype="TRI")

        assert scorer.overall_score(matching, profile, "Musclé") > scorer.overall_score(other, profile, "Musclé")

    def test_custom_weights(self):
        scorer = ArchetypeScorer(ScoringWeights(
            bmi_compatibility=1.0, morph_similarity=0.0, muscle_similarity=0.0, semantic_match=0.0,
        ))
        profile = _profile(estimated_bmi=24.0)

        assert scorer.overall_score(_archetype(), profile) == pytest.approx(0.5)


class TestDistance:
    """Diagnostic distance."""

    def test_weighted_sum(self):
        scorer = ArchetypeScorer()
        profile = _profile(estimated_bmi=25.0, morph_index=0.05, muscle_index=0.15)

        # 0.4 * 0.1 + 0.35 * 0.2 + 0.25 * 1.0
        assert scorer.distance(_archetype(), profile) == pytest.approx(0.36)

    def test_identical_is_zero(self):
        scorer = ArchetypeScorer()
        profile = _profile(estimated_bmi=23.0, morph_index=0.15, muscle_index=0.35)

        assert scorer.distance(_archetype(), profile) == pytest.approx(0.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
