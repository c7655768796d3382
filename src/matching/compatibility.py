"""
Muscularity compatibility matrix.

For each canonical muscularity level, the archetype muscularity levels
that may be used as substitutes during gating. The sets are empirically
tuned against the catalog and are deliberately not symmetric: "Normal"
reaches out to muscled archetypes (lean builds with real muscle mass sit
in a normal BMI band) while "Athlétique" stays narrow. Masculine and
feminine rows cross-reference each other's spellings.

Edit the table, bump ``MATRIX_VERSION``.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

from matching import vocabulary as v


MATRIX_VERSION = "2024.2"

_COMPATIBILITY_ROWS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    # atrophy spectrum
    (v.ATROPHY, (
        v.SEVERE_ATROPHY, v.ATROPHY, v.SLIGHT_ATROPHY, v.NORMAL,
        v.SEVERE_ATROPHY_F, v.LESS_MUSCULAR_F, v.MEDIUM_MUSCULAR_F,
    )),
    (v.SEVERE_ATROPHY, (
        v.SEVERE_ATROPHY, v.ATROPHY, v.SLIGHT_ATROPHY,
        v.SEVERE_ATROPHY_F, v.LESS_MUSCULAR_F,
    )),
    (v.SLIGHT_ATROPHY, (
        v.ATROPHY, v.SLIGHT_ATROPHY, v.NORMAL,
        v.LESS_MUSCULAR_F, v.MEDIUM_MUSCULAR_F,
    )),
    # normal spectrum
    (v.NORMAL, (
        v.SLIGHT_ATROPHY, v.NORMAL, v.MEDIUM_MUSCLE, v.MUSCULAR,
        v.LESS_MUSCULAR_F, v.MEDIUM_MUSCULAR_F, v.MUSCULAR_F,
    )),
    (v.MEDIUM_MUSCLE, (
        v.NORMAL, v.MEDIUM_MUSCLE, v.MUSCULAR, v.NORMAL_STOCKY,
        v.MEDIUM_MUSCULAR_F, v.MUSCULAR_F,
    )),
    # athletic spectrum
    (v.MUSCULAR, (
        v.NORMAL, v.MEDIUM_MUSCLE, v.MUSCULAR, v.NORMAL_STOCKY, v.ATHLETIC,
        v.MEDIUM_MUSCULAR_F, v.MUSCULAR_F,
    )),
    (v.NORMAL_STOCKY, (
        v.MEDIUM_MUSCLE, v.MUSCULAR, v.NORMAL_STOCKY, v.ATHLETIC,
        v.MEDIUM_MUSCULAR_F, v.MUSCULAR_F,
    )),
    (v.ATHLETIC, (
        v.MEDIUM_MUSCLE, v.MUSCULAR, v.NORMAL_STOCKY, v.ATHLETIC,
        v.MUSCULAR_F,
    )),
    # feminine variants
    (v.SEVERE_ATROPHY_F, (
        v.SEVERE_ATROPHY_F, v.SEVERE_ATROPHY, v.ATROPHY, v.LESS_MUSCULAR_F,
    )),
    (v.LESS_MUSCULAR_F, (
        v.ATROPHY, v.SLIGHT_ATROPHY, v.LESS_MUSCULAR_F, v.NORMAL,
        v.MEDIUM_MUSCULAR_F,
    )),
    (v.MEDIUM_MUSCULAR_F, (
        v.LESS_MUSCULAR_F, v.NORMAL, v.MEDIUM_MUSCLE, v.MEDIUM_MUSCULAR_F,
        v.MUSCULAR, v.MUSCULAR_F,
    )),
    (v.MUSCULAR_F, (
        v.NORMAL, v.MEDIUM_MUSCLE, v.MEDIUM_MUSCULAR_F, v.MUSCULAR,
        v.MUSCULAR_F, v.NORMAL_STOCKY, v.ATHLETIC,
    )),
)

MUSCULAR_COMPATIBILITY: Mapping[str, FrozenSet[str]] = MappingProxyType({
    term: frozenset(levels) for term, levels in _COMPATIBILITY_ROWS
})


def compatible_levels(canonical: str) -> FrozenSet[str]:
    """
    Archetype muscularity levels accepted for a canonical term.

    Unknown terms get an empty set; the selector then skips the
    muscularity gate instead of filtering everything out.
    """
    return MUSCULAR_COMPATIBILITY.get(canonical, frozenset())
