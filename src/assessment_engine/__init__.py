"""
Adaptive assessment engine for an English-tutoring console.

This package bundles the pasted-text question parser, mixed multiple-choice and
essay scoring with LLM-backed essay grading, and the A/B/C remediation ladder
that moves students between difficulty levels.
"""

from .config.loader import load_settings
from .ingestion.question_parser import parse_questions_from_text

__all__ = ["load_settings", "parse_questions_from_text"]
