from .question_parser import QuestionParser, count_question_markers, parse_questions_from_text
from .review import ReviewIssue, is_test_ready, review_question_set

__all__ = [
    "QuestionParser",
    "ReviewIssue",
    "count_question_markers",
    "is_test_ready",
    "parse_questions_from_text",
    "review_question_set",
]
