"""Score rating - qualitative label for an analysis score."""

from enum import Enum


class ScoreRating(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    NEEDS_WORK = "NEEDS_WORK"


# Lower bound (inclusive) of each band, highest first
RATING_THRESHOLDS = (
    (90, ScoreRating.EXCELLENT),
    (75, ScoreRating.GOOD),
    (60, ScoreRating.FAIR),
    (0, ScoreRating.NEEDS_WORK),
)

MIN_SCORE = 0
MAX_SCORE = 100


def rate_score(score: int) -> ScoreRating:
    """Map an analysis score in [0, 100] to its rating band

    Example:
        >>> rate_score(90)
        <ScoreRating.EXCELLENT: 'EXCELLENT'>
        >>> rate_score(89)
        <ScoreRating.GOOD: 'GOOD'>

    Raises:
        ValueError: If score is not an integer in [0, 100]
    """
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValueError(f"Score must be an integer, got {score!r}")
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ValueError(f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}")

    for lower_bound, rating in RATING_THRESHOLDS:
        if score >= lower_bound:
            return rating

    # Unreachable: the last band starts at MIN_SCORE
    raise ValueError(f"No rating band for score {score}")
