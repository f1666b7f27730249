"""Tests for parsing pasted text into question records."""

from __future__ import annotations

import pytest

from assessment_engine import parse_questions_from_text
from assessment_engine.ingestion import count_question_markers, is_test_ready, review_question_set
from assessment_engine.learning.models import QuestionKind

from conftest import mc

SAMPLE_TEXT = """[PG] What is the capital of France?
A. London
B. Paris *
C. Berlin
D. Madrid

[ESSAY] Explain the importance of learning English.
KEY: English is important because...

[PG] Which word is a noun?
A. Run
B. Beautiful
C. Computer *
D. Quickly"""


def test_correct_answer_marking():
    """The option ending in '*' becomes the correct answer with the marker stripped."""
    questions = parse_questions_from_text("[PG] 2+2?\nA. 3\nB. 4 *\nC. 5")

    assert len(questions) == 1
    question = questions[0]
    assert question.kind is QuestionKind.MULTIPLE_CHOICE
    assert question.prompt == "2+2?"
    assert question.options == ["3", "4", "5"]
    assert question.correct_option_index == 1
    assert question.correct_answer == "4"


def test_essay_answer_key():
    questions = parse_questions_from_text("[ESSAY] Explain X.\nKEY: because Y")

    assert len(questions) == 1
    assert questions[0].kind is QuestionKind.ESSAY
    assert questions[0].prompt == "Explain X."
    assert questions[0].answer_key == "because Y"
    assert questions[0].options == []


def test_sample_document_round_trip():
    """Every marker produces one question, preserving prompts and option order."""
    questions = parse_questions_from_text(SAMPLE_TEXT)

    assert count_question_markers(SAMPLE_TEXT) == 3
    assert [q.kind for q in questions] == [
        QuestionKind.MULTIPLE_CHOICE,
        QuestionKind.ESSAY,
        QuestionKind.MULTIPLE_CHOICE,
    ]
    assert [q.order for q in questions] == [1, 2, 3]
    assert questions[0].options == ["London", "Paris", "Berlin", "Madrid"]
    assert questions[0].correct_answer == "Paris"
    assert questions[1].answer_key == "English is important because..."
    assert questions[2].options == ["Run", "Beautiful", "Computer", "Quickly"]
    assert questions[2].correct_option_index == 2
    assert len({q.id for q in questions}) == 3


def test_default_points_by_kind():
    questions = parse_questions_from_text(SAMPLE_TEXT)

    assert [q.points for q in questions] == [1, 5, 1]


def test_points_suffix_on_marker_line():
    questions = parse_questions_from_text("[ESAI] Describe your school. (10 poin)\n[MC] Pick one (2 pts)\nA. x *\nB. y")

    assert questions[0].points == 10
    assert questions[0].prompt == "Describe your school."
    assert questions[1].points == 2
    assert questions[1].prompt == "Pick one"


@pytest.mark.parametrize(
    "marker,kind",
    [
        ("[pg]", QuestionKind.MULTIPLE_CHOICE),
        ("[Mc]", QuestionKind.MULTIPLE_CHOICE),
        ("[PILGAN]", QuestionKind.MULTIPLE_CHOICE),
        ("[essay]", QuestionKind.ESSAY),
        ("[Esai]", QuestionKind.ESSAY),
    ],
)
def test_markers_are_case_insensitive(marker, kind):
    questions = parse_questions_from_text(f"{marker} Prompt text\nA. one *\nB. two")

    assert len(questions) == 1
    assert questions[0].kind is kind


def test_multiline_prompt_is_joined_with_single_spaces():
    text = "[PG]\nRead the sentence below.\n  'She go to school.'  \nWhich word is wrong?\nA) She\nB) go *"
    questions = parse_questions_from_text(text)

    assert questions[0].prompt == "Read the sentence below. 'She go to school.' Which word is wrong?"
    assert questions[0].options == ["She", "go"]


def test_last_marked_option_wins():
    questions = parse_questions_from_text("[PG] Pick\nA. first *\nB. second *\nC. third")

    assert questions[0].correct_option_index == 1
    assert questions[0].options == ["first", "second", "third"]


def test_missing_correct_answer_passes_through_as_none():
    questions = parse_questions_from_text("[PG] Pick one\nA. a\nB. b")

    assert len(questions) == 1
    assert questions[0].correct_option_index is None
    assert questions[0].correct_answer is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "   \n\n  ",
        "Just some notes\nwithout any markers\nA. even options",
        "[QUIZ] Unknown marker\nA. x *",
    ],
)
def test_malformed_input_yields_empty_list(text):
    assert parse_questions_from_text(text) == []


def test_questions_without_prompt_or_options_are_skipped():
    text = "[PG]\nA. orphan option *\n[PG] No options here\n[ESSAY]\n[ESSAY] Kept essay"
    questions = parse_questions_from_text(text)

    # "[PG]" followed by an option has no prompt; the second [PG] has no options;
    # the empty [ESSAY] has no prompt.
    assert [q.prompt for q in questions] == ["Kept essay"]
    assert questions[0].order == 1


def test_key_line_in_multiple_choice_is_prompt_text():
    questions = parse_questions_from_text("[PG] Fill the blank\nKEY: word\nA. x *\nB. y")

    assert questions[0].prompt == "Fill the blank KEY: word"


def test_option_like_line_in_essay_is_prompt_text():
    questions = parse_questions_from_text("[ESSAY] Compare\nA. cats\nB. dogs\nKUNCI: both are pets")

    assert questions[0].prompt == "Compare A. cats B. dogs"
    assert questions[0].answer_key == "both are pets"


def test_text_before_first_marker_is_ignored():
    questions = parse_questions_from_text("Grammar quiz, week 3\n\n[ESSAY] Describe your weekend.")

    assert len(questions) == 1
    assert questions[0].prompt == "Describe your weekend."


def test_review_flags_missing_answer_and_short_option_list():
    text = "[PG] One option only\nA. lonely *\n[PG] Unmarked\nA. a\nB. b\n[PG]\nA. dropped"
    questions = parse_questions_from_text(text)
    issues = review_question_set(questions, expected_count=count_question_markers(text))

    messages = [(issue.order, issue.message) for issue in issues]
    assert (None, "Expected 3 question(s) but parsed 2.") in messages
    assert (1, "At least 2 options are required.") in messages
    assert (2, "No option is marked as the correct answer.") in messages
    assert not is_test_ready(issues)


def test_review_passes_clean_set():
    questions = parse_questions_from_text(SAMPLE_TEXT)
    issues = review_question_set(questions, expected_count=3)

    assert issues == []
    assert is_test_ready(issues)


def test_blank_option_lines_are_skipped():
    questions = parse_questions_from_text("[PG] Q\nA. *\nB. x\nC.")

    assert questions[0].options == ["x"]
    assert questions[0].correct_option_index is None
    assert not is_test_ready(review_question_set(questions))


def test_review_flags_blank_option_text():
    questions = [mc("q1", "Pick one", ["", "x"], 0)]

    issues = review_question_set(questions)

    assert [(issue.order, issue.message) for issue in issues] == [(1, "Option text is required.")]
    assert not is_test_ready(issues)
