from __future__ import annotations

import json
import math
import logging

from pydantic import BaseModel, ValidationError

from assessment_engine.agents.llm_client import LLMClient
from assessment_engine.errors import GradingError
from assessment_engine.learning.models import EssayGrade

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = (
    "You are an expert English teacher grading student essays. "
    "Always respond with strict JSON matching this schema:\n"
    '{"score": number, "feedback": str}\n'
    "Do not wrap the JSON in markdown fences."
)


class _RawGrade(BaseModel):
    score: float
    feedback: str = ""


def _clean_json_payload(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        fence_end = text.find("```", 3)
        if fence_end != -1:
            text = text[3:fence_end].strip()
        if text.startswith("json"):
            text = text[4:].strip()
    return text


def parse_grade(raw: str) -> EssayGrade:
    """Parse model output into an EssayGrade, clamping the score to 0-100."""
    cleaned = _clean_json_payload(raw)
    if not cleaned:
        raise GradingError("Empty response from grading model.")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse essay grade response: %s", cleaned)
        raise GradingError("Essay grading failed due to invalid JSON output.") from exc

    try:
        grade = _RawGrade.model_validate(payload)
    except ValidationError as exc:
        logger.error("Essay grade payload validation failed: %s", exc)
        raise GradingError("Essay grading failed due to invalid grade structure.") from exc

    if not math.isfinite(grade.score):
        logger.error("Essay grade score is not a finite number: %s", grade.score)
        raise GradingError("Essay grading failed due to a non-finite score.")

    return EssayGrade(score=max(0.0, min(100.0, grade.score)), feedback=grade.feedback.strip())


class LLMEssayGrader:
    """Grade essays with a chat model on grammar, coherence, and relevance."""

    def __init__(self, llm_client: LLMClient):
        self.llm = llm_client

    async def grade_essay(self, prompt: str, answer: str) -> EssayGrade:
        user_message = (
            "Task: Grade the following student essay based on the question provided.\n\n"
            f'Question: "{prompt}"\n'
            f'Student Answer: "{answer}"\n\n'
            "Requirements:\n"
            "1. Give a score between 0 and 100 based on grammar, coherence, and relevance.\n"
            "2. Provide constructive feedback (max 2 sentences)."
        )
        response = await self.llm.generate(
            [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": user_message},
            ],
            response_format={"type": "json_object"},
        )
        return parse_grade(response)
