"""
BMI range gate.

An archetype passes when the user's BMI falls inside its declared range,
widened by ``epsilon`` on both sides (strict pass) or by
``relaxation + epsilon`` (relaxed pass). Rows without a usable
``bmi_range`` never pass, whatever the tolerance.
"""

from typing import List, Optional, Sequence, TypeVar

from matching.models import Archetype
from matching.telemetry import MatchTelemetry, default_telemetry


A = TypeVar("A", bound=Archetype)


def in_range(bmi: float, min_bmi: float, max_bmi: float, epsilon: float) -> bool:
    """True when ``min - epsilon <= bmi <= max + epsilon``."""
    return min_bmi - epsilon <= bmi <= max_bmi + epsilon


def filter_by_bmi(
    candidates: Sequence[A],
    bmi: float,
    epsilon: float,
    relaxation: float = 0.0,
    telemetry: Optional[MatchTelemetry] = None,
) -> List[A]:
    """
    Keep the candidates whose (widened) BMI range contains ``bmi``.

    Args:
        candidates: Archetypes to filter; order is preserved.
        bmi: The user's estimated BMI.
        epsilon: Tolerance applied to both bounds.
        relaxation: Extra widening for the relaxed pass (0 for strict).
        telemetry: Event sink.

    Returns:
        The surviving candidates, in input order.
    """
    telemetry = telemetry or default_telemetry(__name__)
    survivors: List[A] = []

    for archetype in candidates:
        if archetype.bmi_range is None:
            telemetry.warning(
                "archetype_bmi_range_invalid",
                archetype_id=archetype.id,
            )
            continue

        min_bmi, max_bmi = archetype.bmi_range
        if in_range(bmi, min_bmi - relaxation, max_bmi + relaxation, epsilon):
            survivors.append(archetype)
        else:
            telemetry.debug(
                "archetype_rejected_by_bmi",
                archetype_id=archetype.id,
                bmi=bmi,
                effective_range=(min_bmi - relaxation - epsilon, max_bmi + relaxation + epsilon),
            )

    return survivors
