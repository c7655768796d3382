"""
Morphology mapping: per-gender summary of the archetype catalog.

For each gender the mapping lists the semantic vocabularies present in the
catalog (levels, obesity, morphotypes, muscularity) and the observed
min/max of every numeric shape parameter (``morph_values``) and limb mass
(``limb_masses``). The K-envelope builder clips its ranges to it.

When the catalog cannot be read, a hard-coded snapshot is served instead
and the metadata says so (``fallback_used=True``).
"""

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from matching.catalog import ArchetypeCatalog, bounded_fetch
from matching.errors import CatalogUnavailable
from matching.fallback_mapping import FALLBACK_MAPPING
from matching.models import Gender
from matching.telemetry import MatchTelemetry, default_telemetry


MAPPING_VERSION_DATABASE = "v1.0-catalog-direct"
MAPPING_VERSION_FALLBACK = "v1.0-hardcoded-fallback"


# =============================================================================
# Models
# =============================================================================

class ValueRange(BaseModel):
    min: float
    max: float


class GenderMapping(BaseModel):
    levels: List[str] = Field(default_factory=list)
    obesity: List[str] = Field(default_factory=list)
    morphotypes: List[str] = Field(default_factory=list)
    muscularity: List[str] = Field(default_factory=list)
    gender_codes: List[str] = Field(default_factory=list)
    morph_values: Dict[str, ValueRange] = Field(default_factory=dict)
    limb_masses: Dict[str, ValueRange] = Field(default_factory=dict)
    # Spans over the whole gender; None when no row carries the column
    bmi_range: Optional[ValueRange] = None
    height_range: Optional[ValueRange] = None
    weight_range: Optional[ValueRange] = None
    morph_index: Optional[ValueRange] = None
    muscle_index: Optional[ValueRange] = None
    abdomen_round: Optional[ValueRange] = None


class MorphologyMapping(BaseModel):
    mapping_masculine: GenderMapping
    mapping_feminine: GenderMapping

    def for_gender(self, gender: Gender) -> GenderMapping:
        if Gender(gender) is Gender.MASCULINE:
            return self.mapping_masculine
        return self.mapping_feminine


class MappingMetadata(BaseModel):
    mapping_source: str
    mapping_version: str
    fallback_used: bool
    fallback_reason: Optional[str] = None
    checksum: str
    generated_at: datetime
    total_archetypes_analyzed: int = 0


class MappingResult(BaseModel):
    mapping: MorphologyMapping
    metadata: MappingMetadata


# =============================================================================
# Payload helpers
# =============================================================================

def parse_payload(
    value: Any,
    archetype_id: Any = None,
    telemetry: Optional[MatchTelemetry] = None,
) -> Dict[str, Any]:
    """
    Read a ``morph_values`` / ``limb_masses`` payload.

    The catalog stores them either as JSON objects or as JSON strings.
    Unparseable payloads are reported and read as empty.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            (telemetry or default_telemetry(__name__)).warning(
                "archetype_payload_unparseable",
                archetype_id=archetype_id,
                error=str(e),
            )
            return {}
    return value if isinstance(value, dict) else {}


def is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def numeric_ranges(
    payloads: Iterable[Dict[str, Any]],
) -> Dict[str, ValueRange]:
    """Min/max of every numeric key across payloads."""
    bounds: Dict[str, List[float]] = {}
    for payload in payloads:
        for key, value in payload.items():
            if not is_number(value):
                continue
            if key not in bounds:
                bounds[key] = [value, value]
            else:
                bounds[key][0] = min(bounds[key][0], value)
                bounds[key][1] = max(bounds[key][1], value)
    return {key: ValueRange(min=lo, max=hi) for key, (lo, hi) in bounds.items()}


def _unique_sorted(rows: List[Dict[str, Any]], field: str) -> List[str]:
    return sorted({row[field] for row in rows if row.get(field)})


def _span(values: Iterable[float]) -> Optional[ValueRange]:
    values = list(values)
    if not values:
        return None
    return ValueRange(min=min(values), max=max(values))


def scalar_span(rows: List[Dict[str, Any]], field: str) -> Optional[ValueRange]:
    """Min/max of a numeric column, ignoring rows where it is missing."""
    return _span(row[field] for row in rows if is_number(row.get(field)))


def interval_span(rows: List[Dict[str, Any]], field: str) -> Optional[ValueRange]:
    """
    Hull of a [min, max] column across rows.

    Malformed or inverted intervals are ignored.
    """
    lows: List[float] = []
    highs: List[float] = []
    for row in rows:
        value = row.get(field)
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            continue
        lo, hi = value
        if is_number(lo) and is_number(hi) and lo <= hi:
            lows.append(lo)
            highs.append(hi)
    if not lows:
        return None
    return ValueRange(min=min(lows), max=max(highs))


# =============================================================================
# Builders
# =============================================================================

def build_gender_mapping(
    rows: List[Dict[str, Any]],
    telemetry: Optional[MatchTelemetry] = None,
) -> GenderMapping:
    """Summarize the rows of one gender."""
    return GenderMapping(
        levels=_unique_sorted(rows, "level"),
        obesity=_unique_sorted(rows, "obesity"),
        morphotypes=_unique_sorted(rows, "morphotype"),
        muscularity=_unique_sorted(rows, "muscularity"),
        gender_codes=_unique_sorted(rows, "gender_code"),
        morph_values=numeric_ranges(
            parse_payload(row.get("morph_values"), row.get("id"), telemetry) for row in rows
        ),
        limb_masses=numeric_ranges(
            parse_payload(row.get("limb_masses"), row.get("id"), telemetry) for row in rows
        ),
        bmi_range=interval_span(rows, "bmi_range"),
        height_range=interval_span(rows, "height_range"),
        weight_range=interval_span(rows, "weight_range"),
        morph_index=scalar_span(rows, "morph_index"),
        muscle_index=scalar_span(rows, "muscle_index"),
        abdomen_round=scalar_span(rows, "abdomen_round"),
    )


def build_morphology_mapping(
    rows: List[Dict[str, Any]],
    telemetry: Optional[MatchTelemetry] = None,
) -> MorphologyMapping:
    """Split catalog rows by gender and summarize each half."""
    masculine = [row for row in rows if row.get("gender") == Gender.MASCULINE.value]
    feminine = [row for row in rows if row.get("gender") == Gender.FEMININE.value]
    return MorphologyMapping(
        mapping_masculine=build_gender_mapping(masculine, telemetry),
        mapping_feminine=build_gender_mapping(feminine, telemetry),
    )


def fallback_morphology_mapping() -> MorphologyMapping:
    """The hard-coded snapshot as a MorphologyMapping."""
    def _range(bounds) -> ValueRange:
        lo, hi = bounds
        return ValueRange(min=lo, max=hi)

    def _gender(data: Dict[str, Any]) -> GenderMapping:
        return GenderMapping(
            levels=list(data["levels"]),
            obesity=list(data["obesity"]),
            morphotypes=list(data["morphotypes"]),
            muscularity=list(data["muscularity"]),
            gender_codes=list(data["gender_codes"]),
            bmi_range=_range(data["bmi_range"]),
            height_range=_range(data["height_range"]),
            weight_range=_range(data["weight_range"]),
            morph_index=_range(data["morph_index"]),
            muscle_index=_range(data["muscle_index"]),
            abdomen_round=_range(data["abdomen_round"]),
            morph_values={k: ValueRange(min=lo, max=hi) for k, (lo, hi) in data["morph_values"].items()},
            limb_masses={k: ValueRange(min=lo, max=hi) for k, (lo, hi) in data["limb_masses"].items()},
        )

    return MorphologyMapping(
        mapping_masculine=_gender(FALLBACK_MAPPING["mapping_masculine"]),
        mapping_feminine=_gender(FALLBACK_MAPPING["mapping_feminine"]),
    )


def get_morphology_mapping(
    catalog: ArchetypeCatalog,
    telemetry: Optional[MatchTelemetry] = None,
    fetch_timeout: Optional[float] = None,
) -> MappingResult:
    """
    Build the mapping from the catalog, or serve the fallback snapshot.

    Never raises for catalog problems: a failed, timed out or empty read
    yields the fallback with ``fallback_used=True`` and a degraded-mode
    warning.
    """
    telemetry = telemetry or default_telemetry(__name__)
    now = datetime.now(timezone.utc)

    try:
        rows = bounded_fetch(catalog.fetch_all_archetypes, timeout=fetch_timeout)
        reason = "catalog_empty"
    except CatalogUnavailable as e:
        rows = []
        reason = "catalog_query_failed"
        telemetry.warning("mapping_catalog_read_failed", error=str(e))

    if rows:
        return MappingResult(
            mapping=build_morphology_mapping(rows, telemetry),
            metadata=MappingMetadata(
                mapping_source="database",
                mapping_version=MAPPING_VERSION_DATABASE,
                fallback_used=False,
                checksum=f"db-{len(rows)}-archetypes",
                generated_at=now,
                total_archetypes_analyzed=len(rows),
            ),
        )

    telemetry.warning(
        "mapping_degraded_mode",
        fallback_reason=reason,
        impact="reduced_archetype_precision",
    )
    return MappingResult(
        mapping=fallback_morphology_mapping(),
        metadata=MappingMetadata(
            mapping_source="fallback",
            mapping_version=MAPPING_VERSION_FALLBACK,
            fallback_used=True,
            fallback_reason=reason,
            checksum="hardcoded-fallback",
            generated_at=now,
            total_archetypes_analyzed=0,
        ),
    )
