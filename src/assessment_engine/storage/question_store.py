from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Protocol

from assessment_engine.learning.models import Question, Variant, question_set_id

logger = logging.getLogger(__name__)


class QuestionStore(Protocol):
    """Collaborator that owns persisted question sets."""

    def load_question_set(self, level: int, variant: Variant) -> List[Question]: ...

    def save_questions(self, set_id: str, questions: Iterable[Question]) -> None: ...


class JsonlQuestionStore:
    """JSONL persistence with one file per question set, ordered by question order."""

    def __init__(self, base_dir: Path):
        """Ensure the backing directory exists."""
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, set_id: str) -> Path:
        return self.base_dir / f"{set_id}.jsonl"

    def load(self, set_id: str) -> List[Question]:
        """Read a stored question set, returning an empty list when it does not exist."""
        path = self.path_for(set_id)
        if not path.exists():
            return []
        questions: List[Question] = []
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                questions.append(Question.model_validate_json(line))
        return sorted(questions, key=lambda question: question.order)

    def load_question_set(self, level: int, variant: Variant) -> List[Question]:
        return self.load(question_set_id(level, variant))

    def save_questions(self, set_id: str, questions: Iterable[Question]) -> None:
        """Replace the stored set, renumbering questions 1..n in the given order."""
        ordered = [
            question.model_copy(update={"order": position})
            for position, question in enumerate(questions, start=1)
        ]
        with self.path_for(set_id).open("w", encoding="utf-8") as handle:
            for question in ordered:
                handle.write(question.model_dump_json())
                handle.write("\n")
        logger.info("Saved %d question(s) to set %s", len(ordered), set_id)

    def append_questions(self, set_id: str, questions: Iterable[Question]) -> List[Question]:
        """Add imported questions after the ones already stored in the set."""
        combined = self.load(set_id) + list(questions)
        self.save_questions(set_id, combined)
        return self.load(set_id)

    def delete(self, set_id: str) -> None:
        path = self.path_for(set_id)
        if path.exists():
            path.unlink()
