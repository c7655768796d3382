"""
Archetype matching constants and algorithm configuration.

These are values that don't change based on environment but may need
to be tuned or referenced across the codebase. Environment overrides
come from ``config.settings`` via ``MatchingConfig.from_settings``.
"""

from dataclasses import dataclass


# =============================================================================
# Catalog
# =============================================================================

ARCHETYPE_TABLE = "morph_archetypes"

# Semantic fields compared for the exact-match bonus and coherence score
SEMANTIC_FIELDS = ("obesity", "muscularity", "level", "morphotype")


# =============================================================================
# Matching Pipeline Configuration
# =============================================================================

@dataclass(frozen=True)
class MatchingConfig:
    """Configuration for the gated filter-then-rank pipeline."""

    # BMI gate
    BMI_EPSILON: float = 0.5
    BMI_RELAXATION: float = 8.0

    # Relaxed pass kicks in below this many strict survivors
    MIN_STRICT_CANDIDATES: int = 2

    # Shortlist size
    DEFAULT_LIMIT: int = 5

    @classmethod
    def from_settings(cls, settings) -> "MatchingConfig":
        """Build a config from a ``Settings`` instance."""
        return cls(
            BMI_EPSILON=settings.bmi_epsilon,
            BMI_RELAXATION=settings.bmi_relaxation,
            MIN_STRICT_CANDIDATES=settings.min_strict_candidates,
            DEFAULT_LIMIT=settings.default_match_limit,
        )


# Default matching config instance
DEFAULT_MATCHING_CONFIG = MatchingConfig()


# =============================================================================
# K-Envelope Configuration
# =============================================================================

@dataclass(frozen=True)
class EnvelopeConfig:
    """Margins used when widening archetype ranges into an envelope."""

    SHAPE_PARAM_MARGIN: float = 0.10
    LIMB_MASS_MARGIN: float = 0.05

    # Need at least this many archetype values to trust archetype data
    MIN_ARCHETYPE_VALUES: int = 2

    # Replacement bounds for non-finite ranges
    SHAPE_PARAM_DEFAULT_RANGE: tuple = (-1.0, 1.0)
    LIMB_MASS_DEFAULT_RANGE: tuple = (0.8, 1.2)

    VERSION: str = "v1.0-k-envelope"


DEFAULT_ENVELOPE_CONFIG = EnvelopeConfig()
