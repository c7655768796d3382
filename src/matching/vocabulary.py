"""
Canonical muscularity vocabulary of the archetype catalog.

The catalog is labelled in French; masculine and feminine archetypes use
distinct spellings for some levels.
"""

# Masculine / shared levels
SEVERE_ATROPHY = "Atrophié sévère"
ATROPHY = "Atrophié"
SLIGHT_ATROPHY = "Légèrement atrophié"
NORMAL = "Normal"
NORMAL_STOCKY = "Normal costaud"
MEDIUM_MUSCLE = "Moyen musclé"
MUSCULAR = "Musclé"
ATHLETIC = "Athlétique"

# Feminine levels
SEVERE_ATROPHY_F = "Atrophiée sévère"
LESS_MUSCULAR_F = "Moins musclée"
MEDIUM_MUSCULAR_F = "Moyennement musclée"
MUSCULAR_F = "Musclée"

DEFAULT_TERM = NORMAL

CANONICAL_TERMS = frozenset({
    SEVERE_ATROPHY,
    ATROPHY,
    SLIGHT_ATROPHY,
    NORMAL,
    NORMAL_STOCKY,
    MEDIUM_MUSCLE,
    MUSCULAR,
    ATHLETIC,
    SEVERE_ATROPHY_F,
    LESS_MUSCULAR_F,
    MEDIUM_MUSCULAR_F,
    MUSCULAR_F,
})
