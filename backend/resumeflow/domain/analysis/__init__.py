"""Analysis domain module - engine port and score rating"""

from .ports import AnalysisEnginePort, AnalysisError, AnalysisResult, check_result
from .rating import ScoreRating, rate_score

__all__ = [
    "AnalysisEnginePort",
    "AnalysisError",
    "AnalysisResult",
    "check_result",
    "ScoreRating",
    "rate_score",
]
