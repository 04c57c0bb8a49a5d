"""AnalysisEnginePort interface for resume analysis.

Defines the contract every analysis engine must implement. The queue workers
use this interface without knowing which engine (heuristic, LLM, remote
service) produces the score.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


class AnalysisError(Exception):
    """Raised by an engine when a document cannot be analyzed"""
    pass


@dataclass
class AnalysisResult:
    """Result of a successful analysis.

    Attributes:
        score: Integer quality score in [0, 100]
        feedback: Ordered strengths found in the document
        suggestions: Ordered improvement suggestions
    """

    score: int
    feedback: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def check_result(result: AnalysisResult) -> None:
    """Reject engine output that breaks the result contract.

    Raises:
        AnalysisError: If score is not an int in [0, 100] or a list is empty
    """
    score = result.score
    if isinstance(score, bool) or not isinstance(score, int):
        raise AnalysisError(f"Engine returned non-integer score: {score!r}")
    if score < 0 or score > 100:
        raise AnalysisError(f"Engine returned score out of range: {score}")
    if not result.feedback:
        raise AnalysisError("Engine returned no feedback")
    if not result.suggestions:
        raise AnalysisError("Engine returned no suggestions")


class AnalysisEnginePort(ABC):
    """Port interface for resume analysis engines.

    Example implementations:
    - KeywordAnalysisEngine: keyword heuristics, bundled for development
    - A remote NLP/LLM service adapter supplied by the deployment
    """

    name: str = "engine"

    @abstractmethod
    async def analyze(self, content: bytes, mime_type: str) -> AnalysisResult:
        """Analyze raw document bytes.

        Args:
            content: Raw bytes as stored for the document
            mime_type: Resolved MIME type of the document

        Returns:
            AnalysisResult with score, feedback and suggestions

        Raises:
            AnalysisError: If the document cannot be analyzed
        """
        pass
