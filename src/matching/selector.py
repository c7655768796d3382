"""
ArchetypeSelector -- gated filter-then-rank archetype matching.

Pipeline for one request:

    Fetching          all catalog rows for the profile's gender
    MuscularGating    keep archetypes whose muscularity is compatible with
                      the canonical user term; skipped when the term has
                      no compatible levels
    BmiGating strict  BMI range +/- epsilon, on the gated set
    BmiGating relaxed only when strict leaves fewer than
                      MIN_STRICT_CANDIDATES; range +/- (relaxation + epsilon)
                      on the FULL gender catalog, not the gated set
    Scoring           overall_score + diagnostic distance per survivor
    Ranking           stable sort by overall_score desc, truncate to limit
    Done              semantic coherence of the shortlist

Only the fetch can fail the request (``CatalogUnavailable``). Every other
anomaly degrades through a fallback and shows up in ``FilteringStats``
and telemetry.

Usage::

    from matching import SupabaseArchetypeCatalog, match_archetypes

    catalog = SupabaseArchetypeCatalog(get_supabase_client())
    result = match_archetypes(profile, catalog, limit=5)
    best = result.selected_archetypes[0]
"""

from typing import Callable, FrozenSet, List, Optional

from config.constants import DEFAULT_MATCHING_CONFIG, MatchingConfig
from matching.bmi_filter import filter_by_bmi
from matching.catalog import ArchetypeCatalog, Row, bounded_fetch
from matching.compatibility import compatible_levels
from matching.errors import CatalogUnavailable, InvalidArchetypeData
from matching.models import (
    Archetype,
    FilteringStats,
    Gender,
    ScoredArchetype,
    SelectionResult,
    SelectionStrategy,
    SemanticProfile,
    parse_archetype,
)
from matching.normalizer import normalize_muscularity_term
from matching.scorer import ArchetypeScorer, semantic_coherence
from matching.telemetry import MatchTelemetry, default_telemetry


class ArchetypeSelector:
    """
    Selects the catalog archetypes closest to a semantic profile.

    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        catalog: ArchetypeCatalog,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
        scorer: Optional[ArchetypeScorer] = None,
        telemetry: Optional[MatchTelemetry] = None,
        fetch_timeout: Optional[float] = None,
        levels_for: Callable[[str], FrozenSet[str]] = compatible_levels,
    ):
        self.catalog = catalog
        self.levels_for = levels_for
        self.config = config
        self.scorer = scorer or ArchetypeScorer()
        self.telemetry = telemetry or default_telemetry(__name__)
        self.fetch_timeout = fetch_timeout

    # =========================================================================
    # Public API
    # =========================================================================

    def select(self, profile: SemanticProfile, limit: Optional[int] = None) -> SelectionResult:
        """
        Run the full pipeline for one profile.

        Args:
            profile: The user's semantic body profile.
            limit: Shortlist size (defaults to ``config.DEFAULT_LIMIT``).

        Returns:
            SelectionResult, possibly with an empty shortlist.

        Raises:
            CatalogUnavailable: Catalog read failed, timed out or was empty.
            ValueError: ``limit`` is smaller than 1.
        """
        limit = self.config.DEFAULT_LIMIT if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        telemetry = self.telemetry
        gender = profile.gender
        stats = FilteringStats(epsilon_used=self.config.BMI_EPSILON)

        # Fetching
        rows = self._fetch(gender)
        stats.total_archetypes = len(rows)
        archetypes = self._parse_rows(rows, gender, stats)
        stats.after_gender_filter = len(archetypes)

        telemetry.info(
            "archetypes_fetched",
            gender=gender.value,
            total=stats.total_archetypes,
            usable=stats.after_gender_filter,
            invalid=stats.invalid_archetypes,
        )

        # MuscularGating
        canonical = normalize_muscularity_term(profile.muscularity, telemetry)
        gated = self._gate_muscularity(archetypes, canonical, stats)

        # BmiGating (strict, then relaxed if needed)
        bmi = profile.estimated_bmi
        candidates = filter_by_bmi(gated, bmi, self.config.BMI_EPSILON, telemetry=telemetry)
        stats.strict_bmi_candidates = len(candidates)
        strategy = SelectionStrategy.STRICT

        if len(candidates) < self.config.MIN_STRICT_CANDIDATES:
            telemetry.warning(
                "bmi_relaxation_applied",
                bmi=bmi,
                strict_candidates=len(candidates),
                relaxation=self.config.BMI_RELAXATION,
            )
            candidates = filter_by_bmi(
                archetypes,
                bmi,
                self.config.BMI_EPSILON,
                relaxation=self.config.BMI_RELAXATION,
                telemetry=telemetry,
            )
            stats.bmi_relaxation_applied = True
            stats.relaxation_used = self.config.BMI_RELAXATION
            strategy = SelectionStrategy.BMI_RELAXED

        stats.after_bmi_filter = len(candidates)

        # Scoring
        scored = [self._score(a, profile, canonical) for a in candidates]
        stats.after_semantic_filter = len(scored)

        # Ranking (list.sort is stable, ties keep catalog order)
        scored.sort(key=lambda s: s.overall_score, reverse=True)
        selected = scored[:limit]
        stats.final_selected = len(selected)

        # Done
        coherence = semantic_coherence(selected, profile, canonical)

        if not selected:
            telemetry.warning(
                "no_archetype_selected",
                bmi=bmi,
                canonical_muscularity=canonical,
                strategy=strategy.value,
            )

        telemetry.info(
            "archetype_selection_completed",
            strategy=strategy.value,
            selected_ids=[a.id for a in selected],
            semantic_coherence_score=round(coherence, 3),
            filtering_stats=stats.model_dump(),
        )

        return SelectionResult(
            selected_archetypes=selected,
            strategy_used=strategy,
            semantic_coherence_score=coherence,
            filtering_stats=stats,
        )

    # =========================================================================
    # Stages
    # =========================================================================

    def _fetch(self, gender: Gender) -> List[Row]:
        try:
            rows = bounded_fetch(
                self.catalog.fetch_archetypes,
                gender,
                timeout=self.fetch_timeout,
                gender=gender.value,
            )
        except CatalogUnavailable:
            raise
        except Exception as e:
            raise CatalogUnavailable(
                f"Failed to fetch archetypes: {e}", gender=gender.value
            ) from e

        if not rows:
            raise CatalogUnavailable(
                f"No archetypes found for gender {gender.value}", gender=gender.value
            )
        return rows

    def _parse_rows(
        self, rows: List[Row], gender: Gender, stats: FilteringStats
    ) -> List[Archetype]:
        archetypes: List[Archetype] = []
        for row in rows:
            try:
                archetype = parse_archetype(row)
            except InvalidArchetypeData as e:
                stats.invalid_archetypes += 1
                self.telemetry.warning(
                    "invalid_archetype_data",
                    archetype_id=e.archetype_id,
                    error=str(e),
                )
                continue

            if archetype.gender is not gender:
                self.telemetry.warning(
                    "archetype_gender_mismatch",
                    archetype_id=archetype.id,
                    expected=gender.value,
                    actual=archetype.gender.value,
                )
                continue
            archetypes.append(archetype)
        return archetypes

    def _gate_muscularity(
        self, archetypes: List[Archetype], canonical: str, stats: FilteringStats
    ) -> List[Archetype]:
        levels = self.levels_for(canonical)
        stats.canonical_muscularity = canonical
        stats.compatible_levels = sorted(levels)

        if levels:
            gated = [a for a in archetypes if a.muscularity in levels]
            stats.muscular_gating_successful = True
            self.telemetry.info(
                "muscular_gating_applied",
                canonical_muscularity=canonical,
                before=len(archetypes),
                after=len(gated),
            )
        else:
            # Permissive fallback: no compatible levels means no gate
            gated = list(archetypes)
            stats.muscular_gating_successful = False
            self.telemetry.warning(
                "muscular_gate_skipped",
                reason="no_compatible_muscular_levels",
                canonical_muscularity=canonical,
                available_muscularities=sorted({a.muscularity for a in archetypes if a.muscularity}),
            )

        stats.after_muscular_gating = len(gated)
        return gated

    def _score(
        self, archetype: Archetype, profile: SemanticProfile, canonical: str
    ) -> ScoredArchetype:
        data = archetype.model_dump()
        data["distance"] = self.scorer.distance(archetype, profile)
        data["overall_score"] = self.scorer.overall_score(archetype, profile, canonical)
        return ScoredArchetype.model_validate(data)


def match_archetypes(
    profile: SemanticProfile,
    catalog: ArchetypeCatalog,
    limit: Optional[int] = None,
    **selector_kwargs,
) -> SelectionResult:
    """One-shot convenience wrapper around ``ArchetypeSelector.select``."""
    return ArchetypeSelector(catalog, **selector_kwargs).select(profile, limit)
