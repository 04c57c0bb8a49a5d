from .keyword_engine import KeywordAnalysisEngine
from .text_extraction import extract_text

__all__ = ["KeywordAnalysisEngine", "extract_text"]
