from assessment_engine.learning.models import question_set_id

from .question_store import JsonlQuestionStore, QuestionStore

__all__ = ["JsonlQuestionStore", "QuestionStore", "question_set_id"]
