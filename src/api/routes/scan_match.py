"""
Scan match routes.

POST /api/scan/match takes the semantic profile produced by the body
scan, selects the closest catalog archetypes and returns them together
with the K-envelope built from their morphological payload.
"""

import time
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from config.constants import MatchingConfig
from config.database import SupabaseClientError, get_supabase_client
from config.settings import get_settings
from core.logging import bind_context, get_logger
from matching import (
    ArchetypeCatalog,
    ArchetypeSelector,
    CatalogUnavailable,
    Gender,
    SemanticProfile,
    Sex,
    SupabaseArchetypeCatalog,
    build_envelope,
    get_morphology_mapping,
    validate_envelope_integrity,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/api/scan", tags=["Scan Match"])


# =============================================================================
# Request Models
# =============================================================================

class MatchingConfigIn(BaseModel):
    """Catalog side of the request: which gender, how many archetypes."""
    gender: Gender = Field(..., description="Catalog gender: 'masculine' or 'feminine'")
    limit: Optional[int] = Field(default=None, ge=1, description="Shortlist size")


class ExtractedDataIn(BaseModel):
    estimated_bmi: float = Field(..., allow_inf_nan=False)


class SemanticLabelsIn(BaseModel):
    obesity: Optional[str] = None
    muscularity: Optional[str] = None
    level: Optional[str] = None
    morphotype: Optional[str] = None


class SemanticIndicesIn(BaseModel):
    morph_index: float = Field(..., allow_inf_nan=False)
    muscle_index: float = Field(..., allow_inf_nan=False)


class ScanMatchRequest(BaseModel):
    """Body of POST /api/scan/match."""
    matching_config: MatchingConfigIn
    extracted_data: ExtractedDataIn
    semantic_profile: SemanticLabelsIn = Field(default_factory=SemanticLabelsIn)
    user_semantic_indices: SemanticIndicesIn

    def to_profile(self) -> SemanticProfile:
        sex = Sex.MALE if self.matching_config.gender is Gender.MASCULINE else Sex.FEMALE
        return SemanticProfile(
            sex=sex,
            estimated_bmi=self.extracted_data.estimated_bmi,
            morph_index=self.user_semantic_indices.morph_index,
            muscle_index=self.user_semantic_indices.muscle_index,
            **self.semantic_profile.model_dump(),
        )


# =============================================================================
# Dependencies
# =============================================================================

def get_archetype_catalog() -> ArchetypeCatalog:
    """Supabase-backed catalog; a client that cannot be built is a catalog outage."""
    settings = get_settings()
    try:
        client = get_supabase_client()
    except SupabaseClientError as e:
        raise CatalogUnavailable(str(e)) from e
    return SupabaseArchetypeCatalog(client, table=settings.archetype_table)


def get_archetype_selector(
    catalog: ArchetypeCatalog = Depends(get_archetype_catalog),
) -> ArchetypeSelector:
    settings = get_settings()
    return ArchetypeSelector(
        catalog,
        config=MatchingConfig.from_settings(settings),
        fetch_timeout=settings.catalog_fetch_timeout_seconds,
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/match", summary="Match a semantic body profile to catalog archetypes")
def scan_match(
    request: ScanMatchRequest,
    selector: ArchetypeSelector = Depends(get_archetype_selector),
) -> Dict[str, Any]:
    """
    Select the closest archetypes and build their K-envelope.

    Returns 422 when no archetype survives filtering and 503 when the
    catalog cannot be read.
    """
    start_time = time.perf_counter()
    settings = get_settings()

    limit = request.matching_config.limit or settings.default_match_limit
    if limit > settings.max_match_limit:
        raise HTTPException(
            status_code=422,
            detail=f"limit must be <= {settings.max_match_limit}",
        )

    profile = request.to_profile()
    bind_context(gender=profile.gender.value)

    result = selector.select(profile, limit)
    stats = result.filtering_stats.model_dump(by_alias=True)

    if not result.selected_archetypes:
        logger.error(
            "No archetypes selected after all filtering steps",
            estimated_bmi=profile.estimated_bmi,
            muscularity=profile.muscularity,
            filtering_stats=stats,
        )
        raise HTTPException(
            status_code=422,
            detail={
                "error": "No suitable archetypes found after all filtering steps",
                "strategy_used": result.strategy_used.value,
                "filtering_stats": stats,
            },
        )

    mapping_result = get_morphology_mapping(
        selector.catalog, fetch_timeout=selector.fetch_timeout
    )
    trace_id = f"envelope_{uuid.uuid4().hex[:12]}"
    envelope = build_envelope(
        result.selected_archetypes,
        mapping_result.mapping.for_gender(profile.gender),
        trace_id,
    )
    validation = validate_envelope_integrity(envelope, trace_id)
    final_envelope = validation.corrected_envelope or envelope

    processing_time_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Scan match completed",
        primary_archetype_id=result.selected_archetypes[0].id,
        selected=len(result.selected_archetypes),
        strategy_used=result.strategy_used.value,
        semantic_coherence_score=round(result.semantic_coherence_score, 3),
        degraded_mapping=mapping_result.metadata.fallback_used,
        processing_time_ms=round(processing_time_ms, 2),
    )

    return {
        "selected_archetypes": [a.model_dump(mode="json") for a in result.selected_archetypes],
        "k5_envelope": final_envelope.model_dump(mode="json"),
        "envelope_valid": validation.is_valid,
        "strategy_used": result.strategy_used.value,
        "semantic_coherence_score": result.semantic_coherence_score,
        "filtering_stats": stats,
        "mapping_metadata": mapping_result.metadata.model_dump(mode="json"),
        "user_semantic_profile": profile.model_dump(mode="json"),
        "processing_time_ms": round(processing_time_ms, 2),
    }
