"""
Body-scan archetype matching.

Given a semantic body profile (muscularity/obesity labels, BMI, morph and
muscle indices), select the closest archetypes from the reference catalog
through muscularity gating, a BMI gate with relaxation, and weighted
multi-criteria ranking.

Quick start::

    from matching import SemanticProfile, SupabaseArchetypeCatalog, match_archetypes

    profile = SemanticProfile(
        sex="male",
        muscularity="musclé",
        estimated_bmi=23.0,
        morph_index=0.1,
        muscle_index=0.3,
    )
    result = match_archetypes(profile, SupabaseArchetypeCatalog(client), limit=5)
"""

from matching.catalog import (
    ArchetypeCatalog,
    InMemoryArchetypeCatalog,
    SupabaseArchetypeCatalog,
)
from matching.compatibility import compatible_levels
from matching.envelope import Envelope, build_envelope, validate_envelope_integrity
from matching.errors import CatalogUnavailable, InvalidArchetypeData, MatchingError
from matching.mapping import MappingResult, get_morphology_mapping
from matching.models import (
    Archetype,
    FilteringStats,
    Gender,
    ScoredArchetype,
    SelectionResult,
    SelectionStrategy,
    SemanticProfile,
    Sex,
)
from matching.normalizer import normalize_muscularity_term
from matching.scorer import ArchetypeScorer, ScoringWeights
from matching.selector import ArchetypeSelector, match_archetypes
from matching.telemetry import MatchTelemetry, RecordingTelemetry

__all__ = [
    "Archetype",
    "ArchetypeCatalog",
    "ArchetypeScorer",
    "ArchetypeSelector",
    "CatalogUnavailable",
    "Envelope",
    "FilteringStats",
    "Gender",
    "InMemoryArchetypeCatalog",
    "InvalidArchetypeData",
    "MappingResult",
    "MatchTelemetry",
    "MatchingError",
    "RecordingTelemetry",
    "ScoredArchetype",
    "ScoringWeights",
    "SelectionResult",
    "SelectionStrategy",
    "SemanticProfile",
    "Sex",
    "SupabaseArchetypeCatalog",
    "build_envelope",
    "compatible_levels",
    "get_morphology_mapping",
    "match_archetypes",
    "normalize_muscularity_term",
    "validate_envelope_integrity",
]
