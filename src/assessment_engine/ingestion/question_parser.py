from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from assessment_engine.learning.models import Question, QuestionKind

logger = logging.getLogger(__name__)

MULTIPLE_CHOICE_MARKERS = ("PG", "MC", "PILGAN")
ESSAY_MARKERS = ("ESSAY", "ESAI")

_MARKER_RE = re.compile(
    r"^\[(?P<marker>%s)\]\s*(?P<rest>.*)$" % "|".join(MULTIPLE_CHOICE_MARKERS + ESSAY_MARKERS),
    re.IGNORECASE,
)
_POINTS_RE = re.compile(r"\s*\((?P<points>\d+)\s*(?:pts?|points?|poin)\)\s*$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^[A-D][.)]\s*(?P<text>.*)$", re.IGNORECASE)
_KEY_RE = re.compile(r"^(?:KUNCI|KEY|JAWABAN):\s*(?P<text>.*)$", re.IGNORECASE)


@dataclass
class _Draft:
    """Question being accumulated line by line."""

    kind: QuestionKind
    prompt_parts: List[str] = field(default_factory=list)
    options: List[str] = field(default_factory=list)
    correct_option_index: Optional[int] = None
    answer_key: Optional[str] = None
    points: Optional[int] = None

    @property
    def prompt(self) -> str:
        return " ".join(self.prompt_parts).strip()


def _marker_kind(marker: str) -> QuestionKind:
    if marker.upper() in MULTIPLE_CHOICE_MARKERS:
        return QuestionKind.MULTIPLE_CHOICE
    return QuestionKind.ESSAY


def count_question_markers(text: str | None) -> int:
    """Count marker lines so authors can compare expected vs. parsed questions."""
    if not text:
        return 0
    return sum(1 for line in text.splitlines() if _MARKER_RE.match(line.strip()))


class QuestionParser:
    """
    Turn loosely formatted pasted text into question records.

    Multiple-choice questions start with ``[PG]``, ``[MC]`` or ``[PILGAN]``,
    essays with ``[ESSAY]`` or ``[ESAI]``. Options are lines such as ``B. Paris *``
    where the trailing ``*`` marks the correct answer; when several options are
    marked, the last one wins. Essay answer keys use ``KEY:``, ``KUNCI:`` or
    ``JAWABAN:``. Anything else continues the open question's prompt.

    The parser never raises on malformed input. Fragments it cannot place are
    skipped and the caller compares the result with ``count_question_markers``.
    """

    def parse(self, text: str | None) -> List[Question]:
        if not text:
            return []

        questions: List[Question] = []
        draft: Optional[_Draft] = None

        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue

            marker = _MARKER_RE.match(line)
            if marker:
                self._flush(draft, questions)
                draft = self._start(marker.group("marker"), marker.group("rest"))
                continue

            if draft is None:
                logger.debug("Skipping line %d outside any question: %r", line_no, line)
                continue

            if draft.kind is QuestionKind.MULTIPLE_CHOICE:
                option = _OPTION_RE.match(line)
                if option:
                    self._add_option(draft, option.group("text"))
                    continue
            else:
                key = _KEY_RE.match(line)
                if key:
                    draft.answer_key = key.group("text").strip() or None
                    continue

            draft.prompt_parts.append(line)

        self._flush(draft, questions)
        logger.info("Parsed %d question(s) from pasted text", len(questions))
        return questions

    def _start(self, marker: str, rest: str) -> _Draft:
        draft = _Draft(kind=_marker_kind(marker))
        points = _POINTS_RE.search(rest)
        if points:
            draft.points = int(points.group("points")) or None
            rest = rest[: points.start()]
        if rest.strip():
            draft.prompt_parts.append(rest.strip())
        return draft

    def _add_option(self, draft: _Draft, text: str) -> None:
        text = text.strip()
        marked = text.endswith("*")
        if marked:
            text = text[:-1].rstrip()
        if not text:
            logger.debug("Skipping blank option in %r", draft.prompt)
            return
        if marked:
            draft.correct_option_index = len(draft.options)
        draft.options.append(text)

    def _flush(self, draft: Optional[_Draft], questions: List[Question]) -> None:
        if draft is None:
            return
        if not draft.prompt:
            logger.debug("Dropping %s question without prompt", draft.kind.value)
            return
        if draft.kind is QuestionKind.MULTIPLE_CHOICE and not draft.options:
            logger.debug("Dropping multiple-choice question without options: %r", draft.prompt)
            return
        try:
            question = Question(
                kind=draft.kind,
                prompt=draft.prompt,
                options=draft.options if draft.kind is QuestionKind.MULTIPLE_CHOICE else [],
                correct_option_index=draft.correct_option_index,
                answer_key=draft.answer_key,
                points=draft.points,
                order=len(questions) + 1,
            )
        except ValidationError as exc:
            logger.debug("Dropping unparseable question %r: %s", draft.prompt, exc)
            return
        questions.append(question)


def parse_questions_from_text(text: str | None) -> List[Question]:
    """Parse pasted text into questions; the entry point used by authoring tools."""
    return QuestionParser().parse(text)
