from enum import Enum


class SkillLevel(str, Enum):
    advanced = "advanced"
    intermediate = "intermediate"
    beginner = "beginner"


class Gender(str, Enum):
    male = "male"
    female = "female"


class FormationPolicy(str, Enum):
    """How the roster of a stage is turned into pairs."""

    seeded = "seeded"  # seed protection + history (default)
    balanced = "balanced"  # diversify skill levels inside each pair
    same_level = "same_level"  # only meaningful for mixed-gender stages
    free = "free"  # plain random draw


class GenderPolicy(str, Enum):
    single = "single"
    mixed = "mixed"  # every pair is one man + one woman
