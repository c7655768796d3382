"""
Archetype catalog collaborators.

The matcher only needs "all rows for a gender"; the morphology mapping
needs "all rows". Both come back as raw dicts, validation happens in the
selector so one bad row never sinks a request.
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from config.constants import ARCHETYPE_TABLE
from matching.errors import CatalogUnavailable
from matching.models import Gender


Row = Dict[str, Any]

# Columns needed by the morphology mapping (the matcher reads "*")
MAPPING_COLUMNS = (
    "id, name, gender, gender_code, obesity, muscularity, level, morphotype, "
    "morph_index, muscle_index, bmi_range, height_range, weight_range, "
    "morph_values, limb_masses, abdomen_round"
)


class ArchetypeCatalog(Protocol):
    """Read-only access to the archetype catalog."""

    def fetch_archetypes(self, gender: Gender) -> List[Row]:
        """All rows for one gender. Raises CatalogUnavailable on storage errors."""
        ...

    def fetch_all_archetypes(self) -> List[Row]:
        """Every row, both genders. Raises CatalogUnavailable on storage errors."""
        ...


def bounded_fetch(
    fetch: Callable[..., List[Row]],
    *args: Any,
    timeout: Optional[float] = None,
    gender: Optional[str] = None,
) -> List[Row]:
    """
    Run a catalog read, giving up after ``timeout`` seconds.

    With no timeout the read runs inline. A read that outlives the timeout
    raises CatalogUnavailable; its worker thread is left to finish alone.
    """
    if timeout is None:
        return fetch(*args)

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fetch, *args)
    try:
        return future.result(timeout=timeout)
    except FuturesTimeoutError as e:
        raise CatalogUnavailable(
            f"Catalog fetch timed out after {timeout}s", gender=gender
        ) from e
    finally:
        # Don't wait on a hung read
        executor.shutdown(wait=False)


class SupabaseArchetypeCatalog:
    """Catalog backed by the ``morph_archetypes`` table in Supabase."""

    def __init__(self, client, table: str = ARCHETYPE_TABLE):
        self.client = client
        self.table = table

    def fetch_archetypes(self, gender: Gender) -> List[Row]:
        gender = Gender(gender)
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("gender", gender.value)
                .execute()
            )
        except Exception as e:
            raise CatalogUnavailable(
                f"Failed to fetch archetypes: {e}", gender=gender.value
            ) from e
        return list(response.data or [])

    def fetch_all_archetypes(self) -> List[Row]:
        try:
            response = self.client.table(self.table).select(MAPPING_COLUMNS).execute()
        except Exception as e:
            raise CatalogUnavailable(f"Failed to fetch archetypes: {e}") from e
        return list(response.data or [])


class InMemoryArchetypeCatalog:
    """Catalog over a fixed list of rows (fixtures, offline runs)."""

    def __init__(self, rows: Iterable[Row], error: Optional[Exception] = None):
        self.rows = list(rows)
        self.error = error

    def _check(self, gender: Optional[str] = None) -> None:
        if self.error is not None:
            raise CatalogUnavailable(
                f"Failed to fetch archetypes: {self.error}", gender=gender
            ) from self.error

    def fetch_archetypes(self, gender: Gender) -> List[Row]:
        gender = Gender(gender)
        self._check(gender.value)
        return [dict(row) for row in self.rows if row.get("gender") == gender.value]

    def fetch_all_archetypes(self) -> List[Row]:
        self._check()
        return [dict(row) for row in self.rows]
