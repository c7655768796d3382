"""
Muscularity term normalization.

The vision step reports muscularity as free text ("musclé", "MUSCLEE",
"slightly atrophied", "très musclé"...). The catalog only knows the
canonical terms in ``matching.vocabulary``. ``normalize_muscularity_term``
maps one onto the other and never raises.

Lookup order:
  1. exact synonym on the folded text (no accents, lowercase, single spaces)
  2. keyword fallback: severe -> atrophy (slight if "leger") -> medium
     -> muscular -> athletic
  3. "Normal"
"""

import unicodedata
from typing import Any, Dict, Optional

from matching import vocabulary as v
from matching.telemetry import MatchTelemetry, default_telemetry


# ── Synonym table (folded form -> canonical term) ─────────────────
# Keys are stored already folded; see fold_term().
MUSCULARITY_SYNONYMS: Dict[str, str] = {
    # atrophy spectrum
    "atrophie": v.ATROPHY,
    "atrophiee": v.ATROPHY,
    "atrophied": v.ATROPHY,
    "atrophie severe": v.SEVERE_ATROPHY,
    "atrophiee severe": v.SEVERE_ATROPHY_F,
    "severe atrophy": v.SEVERE_ATROPHY,
    "severely atrophied": v.SEVERE_ATROPHY,
    "legerement atrophie": v.SLIGHT_ATROPHY,
    "legerement atrophiee": v.SLIGHT_ATROPHY,
    "slightly atrophied": v.SLIGHT_ATROPHY,
    "moins musclee": v.LESS_MUSCULAR_F,
    "less muscular": v.LESS_MUSCULAR_F,
    # normal spectrum
    "normal": v.NORMAL,
    "normale": v.NORMAL,
    "normal costaud": v.NORMAL_STOCKY,
    "normale costaude": v.NORMAL_STOCKY,
    "stocky": v.NORMAL_STOCKY,
    # muscled spectrum
    "moyen muscle": v.MEDIUM_MUSCLE,
    "moyennement muscle": v.MEDIUM_MUSCULAR_F,
    "moyennement musclee": v.MEDIUM_MUSCULAR_F,
    "medium muscle": v.MEDIUM_MUSCLE,
    "moderately muscular": v.MEDIUM_MUSCLE,
    "muscle": v.MUSCULAR,
    "musclee": v.MUSCULAR_F,
    "muscular": v.MUSCULAR,
    "athletique": v.ATHLETIC,
    "athletic": v.ATHLETIC,
}


def fold_term(term: str) -> str:
    """Strip diacritics, lowercase and collapse whitespace."""
    decomposed = unicodedata.normalize("NFD", term)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def closest_muscularity_match(folded: str) -> str:
    """Keyword fallback for folded terms missing from the synonym table."""
    if "severe" in folded:
        return v.SEVERE_ATROPHY
    if "atrophi" in folded:
        return v.SLIGHT_ATROPHY if "leger" in folded or "slight" in folded else v.ATROPHY
    if "moyen" in folded or "medium" in folded:
        return v.MEDIUM_MUSCLE
    if "muscl" in folded:
        return v.MUSCULAR
    if "athleti" in folded:
        return v.ATHLETIC
    return v.DEFAULT_TERM


def normalize_muscularity_term(
    raw: Any,
    telemetry: Optional[MatchTelemetry] = None,
) -> str:
    """
    Map a free-form muscularity label onto the canonical vocabulary.

    Args:
        raw: Label from the vision model. Anything that is not a non-empty
            string yields the default term.
        telemetry: Event sink for unmapped / invalid input.

    Returns:
        A canonical term (always a member of ``CANONICAL_TERMS``).
    """
    telemetry = telemetry or default_telemetry(__name__)

    if not isinstance(raw, str) or not raw.strip():
        telemetry.warning(
            "muscularity_term_invalid",
            raw=repr(raw),
            fallback=v.DEFAULT_TERM,
        )
        return v.DEFAULT_TERM

    folded = fold_term(raw)
    mapped = MUSCULARITY_SYNONYMS.get(folded)
    if mapped is not None:
        return mapped

    closest = closest_muscularity_match(folded)
    telemetry.warning(
        "muscularity_term_unmapped",
        raw=raw,
        folded=folded,
        fallback=closest,
    )
    return closest
