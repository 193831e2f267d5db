import json

import pytest

from supasupp.common.response_schema import (
    FollowUpQuestion,
    parse_follow_up_questions,
    parse_health_analysis,
    strip_code_fence,
)


@pytest.mark.parametrize("text, expected", [
    ("```json\n[1, 2]\n```", "[1, 2]"),
    ("```\n[]\n```", "[]"),
    ("  [3]  ", "[3]"),
    ("Sure! ```json\n[]\n```", "Sure! ```json\n[]\n```"),
    (None, ""),
])
def test_strip_code_fence(text, expected):
    assert strip_code_fence(text) == expected


def test_scale_and_text_questions_ignore_options():
    question = FollowUpQuestion(id="s", question="Rate it", type="scale", options=["1", "2"])
    assert question.options is None


def test_select_question_requires_options():
    with pytest.raises(ValueError):
        FollowUpQuestion(id="s", question="Pick", type="select", options=[])


def test_prose_around_array_is_rejected():
    payload = json.dumps([{"id": "a", "question": "Q?", "type": "text"}] * 3)
    result = parse_follow_up_questions(f"Here you go: {payload}")
    assert not result.ok
    assert "not valid JSON" in result.error


def test_non_string_reply_is_a_schema_failure():
    assert not parse_follow_up_questions(None).ok
    assert not parse_health_analysis(None).ok
