"""
Tests for the K-envelope builder and its integrity check.
"""

import json
import math
from datetime import datetime, timezone

import pytest

from config.constants import EnvelopeConfig
from matching.envelope import (
    Envelope,
    EnvelopeMetadata,
    EnvelopeRange,
    build_envelope,
    validate_envelope_integrity,
)
from matching.mapping import GenderMapping, ValueRange
from matching.models import Archetype
from matching.telemetry import RecordingTelemetry


@pytest.fixture
def gender_mapping():
    return GenderMapping(
        morph_values={
            "bigHips": ValueRange(min=-0.5, max=1.0),
            "pearFigure": ValueRange(min=-0.5, max=2.0),
        },
        limb_masses={
            "armMass": ValueRange(min=0.3, max=1.8),
        },
    )


def _archetype(id, morph_values, limb_masses=None):
    return Archetype(
        id=id,
        gender="masculine",
        morph_values=morph_values,
        limb_masses=limb_masses or {},
    )


def _range(lo, hi, source="archetypes"):
    return EnvelopeRange(min=lo, max=hi, archetype_min=lo, archetype_max=hi, source=source)


def _envelope(shape, limbs):
    return Envelope(
        shape_params_envelope=shape,
        limb_masses_envelope=limbs,
        envelope_metadata=EnvelopeMetadata(
            trace_id="t",
            generated_at=datetime.now(timezone.utc),
            envelope_version="test",
        ),
    )


class TestBuildEnvelope:
    """Envelope from selected archetypes."""

    def test_archetype_ranges_with_margin(self, gender_mapping):
        selected = [
            _archetype("a", {"bigHips": 0.2, "pearFigure": 0.3}, {"armMass": 1.0}),
            _archetype("b", {"bigHips": 0.6}, {"armMass": 1.4}),
        ]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        hips = envelope.shape_params_envelope["bigHips"]
        assert hips.source == "archetypes"
        assert hips.min == pytest.approx(0.16)
        assert hips.max == pytest.approx(0.64)
        assert (hips.archetype_min, hips.archetype_max) == (0.2, 0.6)

        arm = envelope.limb_masses_envelope["armMass"]
        assert arm.min == pytest.approx(0.98)
        assert arm.max == pytest.approx(1.42)

    def test_single_value_uses_catalog_range(self, gender_mapping):
        selected = [
            _archetype("a", {"pearFigure": 0.3}),
            _archetype("b", {}),
        ]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        pear = envelope.shape_params_envelope["pearFigure"]
        assert pear.source == "catalog_fallback"
        assert (pear.min, pear.max) == (-0.5, 2.0)

    def test_clipped_to_catalog_range(self, gender_mapping):
        selected = [_archetype("a", {"bigHips": -0.5}), _archetype("b", {"bigHips": 1.0})]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        hips = envelope.shape_params_envelope["bigHips"]
        assert (hips.min, hips.max) == (-0.5, 1.0)

    def test_json_string_payloads(self, gender_mapping):
        selected = [
            _archetype("a", json.dumps({"bigHips": 0.1})),
            _archetype("b", json.dumps({"bigHips": 0.1})),
        ]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        hips = envelope.shape_params_envelope["bigHips"]
        assert hips.source == "archetypes"
        assert hips.min == pytest.approx(0.1)
        assert hips.max == pytest.approx(0.1)

    def test_only_mapping_keys_are_processed(self, gender_mapping):
        selected = [_archetype("a", {"unknownKey": 1.0}), _archetype("b", {"unknownKey": 2.0})]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        assert set(envelope.shape_params_envelope) == {"bigHips", "pearFigure"}

    def test_metadata(self, gender_mapping):
        selected = [
            _archetype("a", {"bigHips": 0.2}, {"armMass": 1.0}),
            _archetype("b", {"bigHips": 0.6}, {"armMass": 1.4}),
        ]

        envelope = build_envelope(selected, gender_mapping, "trace-1", telemetry=RecordingTelemetry())

        meta = envelope.envelope_metadata
        assert meta.trace_id == "trace-1"
        assert meta.archetypes_used == ["a", "b"]
        assert meta.total_keys_processed == 3
        assert meta.keys_with_archetype_data == 2
        assert meta.keys_using_catalog_fallback == 1
        assert meta.envelope_version == EnvelopeConfig().VERSION

    def test_custom_margin(self, gender_mapping):
        selected = [_archetype("a", {"bigHips": 0.0}), _archetype("b", {"bigHips": 0.5})]
        config = EnvelopeConfig(SHAPE_PARAM_MARGIN=0.0)

        envelope = build_envelope(selected, gender_mapping, "t", config=config, telemetry=RecordingTelemetry())

        hips = envelope.shape_params_envelope["bigHips"]
        assert (hips.min, hips.max) == (0.0, 0.5)

    def test_empty_selection_is_all_fallback(self, gender_mapping):
        envelope = build_envelope([], gender_mapping, "t", telemetry=RecordingTelemetry())

        assert envelope.envelope_metadata.keys_with_archetype_data == 0
        assert envelope.envelope_metadata.keys_using_catalog_fallback == 3


class TestValidateEnvelopeIntegrity:
    """Repair of inverted and non-finite ranges."""

    def test_valid_envelope(self):
        envelope = _envelope({"bigHips": _range(0.1, 0.5)}, {"armMass": _range(0.9, 1.1)})

        validation = validate_envelope_integrity(envelope, "t", telemetry=RecordingTelemetry())

        assert validation.is_valid is True
        assert validation.issues == []
        assert validation.corrected_envelope is None

    def test_inverted_range_is_swapped(self):
        envelope = _envelope({"pearFigure": _range(0.9, 0.1)}, {})
        telemetry = RecordingTelemetry()

        validation = validate_envelope_integrity(envelope, "t", telemetry=telemetry)

        assert validation.is_valid is False
        assert validation.issues == ["Invalid shape param range: pearFigure min > max"]
        fixed = validation.corrected_envelope.shape_params_envelope["pearFigure"]
        assert (fixed.min, fixed.max) == (0.1, 0.9)
        assert telemetry.has_event("envelope_integrity_issues")

    def test_non_finite_shape_param_uses_default(self):
        envelope = _envelope({"bigHips": _range(math.nan, 0.5)}, {})

        validation = validate_envelope_integrity(envelope, "t", telemetry=RecordingTelemetry())

        assert validation.issues == ["Non-finite values in shape param range: bigHips"]
        fixed = validation.corrected_envelope.shape_params_envelope["bigHips"]
        assert (fixed.min, fixed.max) == (-1.0, 0.5)

    def test_non_finite_limb_mass_uses_default(self):
        envelope = _envelope({}, {"armMass": _range(-math.inf, 1.0)})

        validation = validate_envelope_integrity(envelope, "t", telemetry=RecordingTelemetry())

        assert validation.issues == ["Non-finite values in limb mass range: armMass"]
        fixed = validation.corrected_envelope.limb_masses_envelope["armMass"]
        assert (fixed.min, fixed.max) == (0.8, 1.0)

    def test_original_envelope_untouched(self):
        envelope = _envelope({"pearFigure": _range(0.9, 0.1)}, {})

        validate_envelope_integrity(envelope, "t", telemetry=RecordingTelemetry())

        assert envelope.shape_params_envelope["pearFigure"].min == 0.9

    def test_built_envelope_is_valid(self, gender_mapping):
        selected = [_archetype("a", {"bigHips": 0.2}), _archetype("b", {"bigHips": 0.6})]
        envelope = build_envelope(selected, gender_mapping, "t", telemetry=RecordingTelemetry())

        assert validate_envelope_integrity(envelope, "t", telemetry=RecordingTelemetry()).is_valid


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
