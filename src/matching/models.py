"""
Pydantic models for the archetype matcher.

Models cover:
- The semantic body profile produced by the upstream scan (input)
- Catalog archetypes (read-only reference rows)
- Scored archetypes, filtering statistics and the selection result (output)
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from matching.errors import InvalidArchetypeData


# =============================================================================
# Enums
# =============================================================================

class Sex(str, Enum):
    """Sex as reported by the upstream estimation step."""
    MALE = "male"
    FEMALE = "female"


class Gender(str, Enum):
    """Gender tag used by the archetype catalog."""
    MASCULINE = "masculine"
    FEMININE = "feminine"

    @classmethod
    def for_sex(cls, sex: "Sex") -> "Gender":
        return cls.MASCULINE if Sex(sex) is Sex.MALE else cls.FEMININE


class SelectionStrategy(str, Enum):
    """Which BMI pass produced the shortlist."""
    STRICT = "strict"
    BMI_RELAXED = "bmi_relaxed"


# =============================================================================
# Input
# =============================================================================

class SemanticProfile(BaseModel):
    """
    Semantic body profile of the user.

    Categorical labels are free-form (vision model output) and may be
    missing; the numeric fields are required and must be finite.
    """
    model_config = ConfigDict(frozen=True)

    sex: Sex
    muscularity: Optional[str] = None
    obesity: Optional[str] = None
    level: Optional[str] = None
    morphotype: Optional[str] = None
    estimated_bmi: float = Field(..., allow_inf_nan=False)
    morph_index: float = Field(..., allow_inf_nan=False)
    muscle_index: float = Field(..., allow_inf_nan=False)

    @property
    def gender(self) -> Gender:
        return Gender.for_sex(self.sex)


# =============================================================================
# Catalog
# =============================================================================

def _parse_bmi_range(value: Any) -> Optional[Tuple[float, float]]:
    """Return (min, max) for a 2-element numeric interval with min <= max, else None."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    bounds = []
    for bound in value:
        if isinstance(bound, bool) or bound is None:
            return None
        try:
            number = float(bound)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        bounds.append(number)
    if bounds[0] > bounds[1]:
        return None
    return bounds[0], bounds[1]


class Archetype(BaseModel):
    """
    One row of the archetype catalog.

    Anything the matcher does not interpret (name, morph_values,
    limb_masses, height/weight ranges...) is kept as an extra field and
    passed through untouched.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    gender: Gender
    obesity: Optional[str] = None
    muscularity: Optional[str] = None
    level: Optional[str] = None
    morphotype: Optional[str] = None
    morph_index: float = Field(default=0.0, allow_inf_nan=False)
    muscle_index: float = Field(default=0.0, allow_inf_nan=False)
    # None means malformed or missing; such rows never pass a BMI gate
    bmi_range: Optional[Tuple[float, float]] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if v is None or isinstance(v, bool):
            raise ValueError("archetype id is required")
        return str(v)

    @field_validator("morph_index", "muscle_index", mode="before")
    @classmethod
    def missing_index_is_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("bmi_range", mode="before")
    @classmethod
    def parse_bmi_range(cls, v):
        return _parse_bmi_range(v)

    @property
    def payload(self) -> Dict[str, Any]:
        """Opaque morphological payload carried alongside the row."""
        return dict(self.model_extra or {})


def parse_archetype(row: Dict[str, Any]) -> Archetype:
    """
    Validate a raw catalog row.

    Raises:
        InvalidArchetypeData: If the row cannot be validated (bad id,
            unknown gender, non-numeric indices...).
    """
    if not isinstance(row, dict):
        raise InvalidArchetypeData(f"catalog row is not a mapping: {type(row).__name__}")
    try:
        return Archetype.model_validate(row)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise InvalidArchetypeData(
            f"invalid archetype row (fields: {', '.join(fields) or 'unknown'})",
            archetype_id=row.get("id"),
        ) from e


# =============================================================================
# Output
# =============================================================================

class ScoredArchetype(Archetype):
    """Archetype plus ranking scores. Lives only for one selection call."""
    distance: float
    overall_score: float


class FilteringStats(BaseModel):
    """Candidate counts at each pipeline stage, for diagnostics."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_archetypes: int = 0
    after_gender_filter: int = 0
    invalid_archetypes: int = 0
    canonical_muscularity: Optional[str] = None
    compatible_levels: List[str] = Field(default_factory=list)
    muscular_gating_successful: bool = False
    after_muscular_gating: int = 0
    strict_bmi_candidates: int = 0
    after_bmi_filter: int = 0
    bmi_relaxation_applied: bool = False
    after_semantic_filter: int = 0
    final_selected: int = 0
    epsilon_used: float = 0.0
    relaxation_used: Optional[float] = None


class SelectionResult(BaseModel):
    """Ranked shortlist plus coherence metric and strategy tag."""
    selected_archetypes: List[ScoredArchetype] = Field(default_factory=list)
    strategy_used: SelectionStrategy
    semantic_coherence_score: float = 0.0
    filtering_stats: FilteringStats
