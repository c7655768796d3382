"""
K-envelope: morphological constraints derived from the selected archetypes.

For every shape parameter and limb mass known to the gender mapping, the
envelope gives the range that downstream refinement may move within:

- at least two selected archetypes carry the key: their min/max, widened
  by a margin (10% of the spread for shape params, 5% for limb masses)
  and clipped to the mapping range  -> source "archetypes"
- otherwise: the mapping range itself  -> source "catalog_fallback"

``validate_envelope_integrity`` repairs inverted and non-finite ranges and
returns the corrected copy alongside the list of issues.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from config.constants import DEFAULT_ENVELOPE_CONFIG, EnvelopeConfig
from matching.mapping import GenderMapping, ValueRange, is_number, parse_payload
from matching.models import Archetype
from matching.telemetry import MatchTelemetry, default_telemetry


SOURCE_ARCHETYPES = "archetypes"
SOURCE_CATALOG_FALLBACK = "catalog_fallback"


class EnvelopeRange(BaseModel):
    min: float
    max: float
    archetype_min: float
    archetype_max: float
    source: str


class EnvelopeMetadata(BaseModel):
    trace_id: str
    archetypes_used: List[str] = Field(default_factory=list)
    total_keys_processed: int = 0
    keys_with_archetype_data: int = 0
    keys_using_catalog_fallback: int = 0
    generated_at: datetime
    envelope_version: str


class Envelope(BaseModel):
    shape_params_envelope: Dict[str, EnvelopeRange] = Field(default_factory=dict)
    limb_masses_envelope: Dict[str, EnvelopeRange] = Field(default_factory=dict)
    envelope_metadata: EnvelopeMetadata


class EnvelopeValidation(BaseModel):
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    corrected_envelope: Optional[Envelope] = None


def _envelope_for(
    payload_field: str,
    archetypes: Sequence[Archetype],
    reference: Dict[str, ValueRange],
    margin_ratio: float,
    config: EnvelopeConfig,
    telemetry: MatchTelemetry,
) -> Dict[str, EnvelopeRange]:
    payloads = [
        parse_payload(a.payload.get(payload_field), a.id, telemetry) for a in archetypes
    ]
    envelope: Dict[str, EnvelopeRange] = {}

    for key, db_range in reference.items():
        values = [p[key] for p in payloads if is_number(p.get(key))]

        if len(values) >= config.MIN_ARCHETYPE_VALUES:
            lo, hi = min(values), max(values)
            margin = (hi - lo) * margin_ratio
            envelope[key] = EnvelopeRange(
                min=max(db_range.min, lo - margin),
                max=min(db_range.max, hi + margin),
                archetype_min=lo,
                archetype_max=hi,
                source=SOURCE_ARCHETYPES,
            )
        else:
            envelope[key] = EnvelopeRange(
                min=db_range.min,
                max=db_range.max,
                archetype_min=db_range.min,
                archetype_max=db_range.max,
                source=SOURCE_CATALOG_FALLBACK,
            )
    return envelope


def build_envelope(
    selected: Sequence[Archetype],
    gender_mapping: GenderMapping,
    trace_id: str,
    config: EnvelopeConfig = DEFAULT_ENVELOPE_CONFIG,
    telemetry: Optional[MatchTelemetry] = None,
) -> Envelope:
    """
    Build the K-envelope for a shortlist.

    Args:
        selected: The selected archetypes (their payload carries
            ``morph_values`` and ``limb_masses``).
        gender_mapping: Catalog ranges for the profile's gender.
        trace_id: Correlation id copied into the metadata and telemetry.
    """
    telemetry = telemetry or default_telemetry(__name__)

    shape = _envelope_for(
        "morph_values", selected, gender_mapping.morph_values,
        config.SHAPE_PARAM_MARGIN, config, telemetry,
    )
    limbs = _envelope_for(
        "limb_masses", selected, gender_mapping.limb_masses,
        config.LIMB_MASS_MARGIN, config, telemetry,
    )

    all_ranges = list(shape.values()) + list(limbs.values())
    with_data = sum(1 for r in all_ranges if r.source == SOURCE_ARCHETYPES)

    envelope = Envelope(
        shape_params_envelope=shape,
        limb_masses_envelope=limbs,
        envelope_metadata=EnvelopeMetadata(
            trace_id=trace_id,
            archetypes_used=[a.id for a in selected],
            total_keys_processed=len(all_ranges),
            keys_with_archetype_data=with_data,
            keys_using_catalog_fallback=len(all_ranges) - with_data,
            generated_at=datetime.now(timezone.utc),
            envelope_version=config.VERSION,
        ),
    )

    telemetry.info(
        "envelope_built",
        trace_id=trace_id,
        shape_params_keys=len(shape),
        limb_masses_keys=len(limbs),
        keys_with_archetype_data=with_data,
    )
    return envelope


def _repair(
    kind: str,
    key: str,
    rng: EnvelopeRange,
    default: tuple,
    issues: List[str],
) -> Optional[EnvelopeRange]:
    fixed = rng
    if fixed.min > fixed.max:
        issues.append(f"Invalid {kind} range: {key} min > max")
        fixed = fixed.model_copy(update={"min": fixed.max, "max": fixed.min})
    if not math.isfinite(fixed.min) or not math.isfinite(fixed.max):
        issues.append(f"Non-finite values in {kind} range: {key}")
        fixed = fixed.model_copy(update={
            "min": fixed.min if math.isfinite(fixed.min) else default[0],
            "max": fixed.max if math.isfinite(fixed.max) else default[1],
        })
    return fixed if fixed is not rng else None


def validate_envelope_integrity(
    envelope: Envelope,
    trace_id: str,
    config: EnvelopeConfig = DEFAULT_ENVELOPE_CONFIG,
    telemetry: Optional[MatchTelemetry] = None,
) -> EnvelopeValidation:
    """
    Check every range for min > max and non-finite bounds.

    Inverted bounds are swapped; non-finite bounds are replaced by the
    configured defaults. ``corrected_envelope`` is set only when something
    was changed.
    """
    telemetry = telemetry or default_telemetry(__name__)
    issues: List[str] = []
    corrected = envelope.model_copy(deep=True)
    corrections = 0

    sections = (
        ("shape_params_envelope", "shape param", config.SHAPE_PARAM_DEFAULT_RANGE),
        ("limb_masses_envelope", "limb mass", config.LIMB_MASS_DEFAULT_RANGE),
    )
    for attr, kind, default in sections:
        ranges = getattr(corrected, attr)
        for key, rng in list(ranges.items()):
            fixed = _repair(kind, key, rng, default, issues)
            if fixed is not None:
                ranges[key] = fixed
                corrections += 1

    is_valid = not issues
    if not is_valid:
        telemetry.warning(
            "envelope_integrity_issues",
            trace_id=trace_id,
            issues=issues[:5],
            corrections=corrections,
        )

    return EnvelopeValidation(
        is_valid=is_valid,
        issues=issues,
        corrected_envelope=corrected if corrections else None,
    )
