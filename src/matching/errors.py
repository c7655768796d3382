"""
Exception types raised by the archetype matcher.

Only ``CatalogUnavailable`` ever reaches the caller of ``match_archetypes``.
``InvalidArchetypeData`` is raised while parsing a single catalog row and is
caught by the selector, which drops the row and carries on.
"""


class MatchingError(Exception):
    """Base class for archetype matching errors."""
    pass


class CatalogUnavailable(MatchingError):
    """The catalog read failed, timed out, or returned no rows for the gender."""

    def __init__(self, message: str, gender: str = None):
        super().__init__(message)
        self.gender = gender


class InvalidArchetypeData(MatchingError):
    """A catalog row could not be turned into an Archetype."""

    def __init__(self, message: str, archetype_id=None):
        super().__init__(message)
        self.archetype_id = archetype_id
