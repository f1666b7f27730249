from .essay_grader import LLMEssayGrader, parse_grade
from .llm_client import LLMClient

__all__ = ["LLMClient", "LLMEssayGrader", "parse_grade"]
