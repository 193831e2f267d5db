import json
import threading

import pytest

from conftest import VALID_QUESTIONS, VALID_RECOMMENDATIONS, route_by_prompt, scripted_factory
from supasupp.common.custom_exception import TransportError
from supasupp.common.fallbacks import (
    FALLBACK_HEALTH_ANALYSIS,
    fallback_follow_up_questions,
    fallback_recommendations,
)
from supasupp.components.ai_orchestrator import (
    ADVISORY_CONFIGURATION,
    ADVISORY_SCHEMA,
    ADVISORY_TRANSPORT,
    AIOrchestrator,
)

ANSWERS = {"age": "34", "gender": "male", "health_goals": ["Better sleep quality"], "stress_level": "8"}


def _never_called(settings):
    raise AssertionError("no backend call expected without a credential")


def _raising(exc):
    def handler(prompt):
        raise exc

    return handler


# --- Missing credential ---

def test_no_credential_short_circuits_every_generation(no_key_settings):
    orchestrator = AIOrchestrator(no_key_settings, client_factory=_never_called)

    questions = orchestrator.generate_follow_up_questions(ANSWERS)
    analysis = orchestrator.generate_health_analysis(ANSWERS)
    recommendations = orchestrator.generate_recommendations(ANSWERS)

    assert questions.value == fallback_follow_up_questions()
    assert analysis.value == FALLBACK_HEALTH_ANALYSIS
    assert recommendations.value == fallback_recommendations()
    for result in (questions, analysis, recommendations):
        assert result.used_fallback
        assert result.advisory.kind == ADVISORY_CONFIGURATION
        assert "API key" in result.advisory.message


def test_missing_credential_is_reported_before_answers_are_serialized(no_key_settings):
    orchestrator = AIOrchestrator(no_key_settings, client_factory=_never_called)

    result = orchestrator.generate_health_analysis({"age": {1, 2}})

    assert result.value == FALLBACK_HEALTH_ANALYSIS
    assert result.advisory.kind == ADVISORY_CONFIGURATION


def test_fallback_output_is_identical_across_calls(no_key_settings):
    orchestrator = AIOrchestrator(no_key_settings, client_factory=_never_called)

    first = orchestrator.generate_recommendations(ANSWERS).value
    second = orchestrator.generate_recommendations(ANSWERS).value
    assert json.dumps([r.model_dump() for r in first]) == json.dumps([r.model_dump() for r in second])

    q1 = orchestrator.generate_follow_up_questions(ANSWERS).value
    q2 = orchestrator.generate_follow_up_questions(ANSWERS).value
    assert [q.model_dump_json() for q in q1] == [q.model_dump_json() for q in q2]

    assert orchestrator.generate_health_analysis({}).value == orchestrator.generate_health_analysis({}).value


def test_credential_set_after_construction_is_used(no_key_settings, valid_questions_json):
    factory = scripted_factory(route_by_prompt(questions=valid_questions_json))
    orchestrator = AIOrchestrator(no_key_settings, client_factory=factory)

    assert orchestrator.generate_follow_up_questions(ANSWERS).used_fallback

    no_key_settings.set_credential("late-key")
    result = orchestrator.generate_follow_up_questions(ANSWERS)
    assert not result.used_fallback
    assert len(factory.built) == 1


# --- Follow-up questions ---

def test_valid_follow_up_questions_are_returned(keyed_settings, valid_questions_json):
    factory = scripted_factory(route_by_prompt(questions=valid_questions_json))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_follow_up_questions(ANSWERS)

    assert result.advisory is None
    assert [q.id for q in result.value] == ["afternoon_energy", "symptoms", "sleep_rating"]
    assert result.value[0].options == ["Energetic", "Slight dip", "Tired", "Crash"]


def test_prompt_embeds_answers_and_demands_json_array(keyed_settings, valid_questions_json):
    factory = scripted_factory(route_by_prompt(questions=valid_questions_json))
    AIOrchestrator(keyed_settings, client_factory=factory).generate_follow_up_questions(ANSWERS)

    prompt = factory.built[0].prompts[0]
    assert json.dumps(ANSWERS, indent=2) in prompt
    assert "exactly 3" in prompt
    assert "Return ONLY the JSON array" in prompt


def test_fenced_json_reply_is_accepted(keyed_settings, valid_questions_json):
    fenced = f"```json\n{valid_questions_json}\n```"
    factory = scripted_factory(route_by_prompt(questions=fenced))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_follow_up_questions(ANSWERS)
    assert result.advisory is None
    assert len(result.value) == 3


def _questions_with(index, **changes):
    questions = [dict(q) for q in VALID_QUESTIONS]
    questions[index].update(changes)
    for key, value in changes.items():
        if value is None:
            questions[index].pop(key)
    return json.dumps(questions)


@pytest.mark.parametrize("reply", [
    "Here are your questions: [",
    "{\"id\": \"q1\"}",
    _questions_with(0, id=None),
    _questions_with(1, question=None),
    _questions_with(2, type=None),
    _questions_with(0, type="slider"),
    _questions_with(0, options=None),
    _questions_with(1, id="afternoon_energy"),
    json.dumps(VALID_QUESTIONS[:2]),
    json.dumps(VALID_QUESTIONS + [VALID_QUESTIONS[0]]),
])
def test_invalid_follow_up_reply_falls_back(keyed_settings, reply):
    factory = scripted_factory(route_by_prompt(questions=reply))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_follow_up_questions(ANSWERS)

    assert result.value == fallback_follow_up_questions()
    assert result.advisory.kind == ADVISORY_SCHEMA
    assert "invalid response format" in result.advisory.message


def test_follow_up_transport_failure_falls_back(keyed_settings):
    factory = scripted_factory(_raising(TransportError("API Error: quota exceeded")))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_follow_up_questions(ANSWERS)

    assert result.value == fallback_follow_up_questions()
    assert result.advisory.kind == ADVISORY_TRANSPORT


def test_fallback_questions_cover_energy_stress_and_concerns():
    questions = fallback_follow_up_questions()
    assert [q.type for q in questions] == ["text", "scale", "text"]
    assert "energy" in questions[0].question
    assert "stress" in questions[1].question
    assert "concerned" in questions[2].question


# --- Health analysis ---

def test_health_analysis_text_is_passed_through(keyed_settings):
    factory = scripted_factory(route_by_prompt(analysis="## Energy\nLow iron likely.\n"))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_health_analysis(ANSWERS)
    assert result.advisory is None
    assert result.value == "## Energy\nLow iron likely."


@pytest.mark.parametrize("handler, kind", [
    (route_by_prompt(analysis="   "), ADVISORY_SCHEMA),
    (_raising(TransportError("Gemini API unreachable")), ADVISORY_TRANSPORT),
    (_raising(RuntimeError("socket closed")), ADVISORY_TRANSPORT),
])
def test_health_analysis_failures_fall_back(keyed_settings, handler, kind):
    result = AIOrchestrator(keyed_settings, client_factory=scripted_factory(handler)).generate_health_analysis(ANSWERS)
    assert result.value == FALLBACK_HEALTH_ANALYSIS
    assert result.advisory.kind == kind


def test_fallback_analysis_covers_all_sections():
    for section in ("Energy & Metabolic Health", "Nutritional Gaps", "Sleep & Recovery",
                    "Digestive Health", "Stress Response"):
        assert f"**{section}**" in FALLBACK_HEALTH_ANALYSIS


# --- Recommendations ---

def test_valid_recommendations_are_returned(keyed_settings, valid_recommendations_json):
    factory = scripted_factory(route_by_prompt(recommendations=valid_recommendations_json))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_recommendations(ANSWERS)

    assert result.advisory is None
    assert [r.name for r in result.value] == [r["name"] for r in VALID_RECOMMENDATIONS]


def _recommendations_with(index, **changes):
    recs = [dict(r) for r in VALID_RECOMMENDATIONS]
    recs[index].update(changes)
    for key, value in changes.items():
        if value is None:
            recs[index].pop(key)
    return json.dumps(recs)


@pytest.mark.parametrize("reply", [
    "[{\"id\": 1, \"name\": \"Vitamin D3\",",
    _recommendations_with(0, priority="urgent"),
    _recommendations_with(1, benefits="Sleep, Relaxation"),
    _recommendations_with(2, dosage=None),
    _recommendations_with(3, name=""),
    _recommendations_with(1, priority="medium"),
    json.dumps(VALID_RECOMMENDATIONS[:4]),
])
def test_invalid_recommendation_reply_returns_literal_fallback(keyed_settings, reply):
    factory = scripted_factory(route_by_prompt(recommendations=reply))
    result = AIOrchestrator(keyed_settings, client_factory=factory).generate_recommendations(ANSWERS)

    assert result.value == fallback_recommendations()
    assert result.advisory.kind == ADVISORY_SCHEMA


def test_fallback_recommendations_literal_content():
    recs = fallback_recommendations()
    assert [(r.id, r.name, r.dosage, r.priority, r.category) for r in recs] == [
        (1, "Vitamin D3", "2000 IU daily", "high", "Basic Essentials"),
        (2, "Magnesium Glycinate", "400mg before bed", "high", "Basic Essentials"),
        (3, "Omega-3 EPA/DHA", "1000mg daily", "medium", "Basic Essentials"),
        (4, "B-Complex", "1 capsule daily", "medium", "Advanced Support"),
        (5, "Probiotic Complex", "10 billion CFU daily", "medium", "Advanced Support"),
    ]
    assert all(len(r.benefits) == 3 for r in recs)
    assert recs[1].timing == "Take 30 minutes before bedtime"


@pytest.mark.parametrize("answers", [{}, ANSWERS, {"notes": "x" * 5000}])
def test_recommendations_always_meet_minimums(no_key_settings, answers):
    recs = AIOrchestrator(no_key_settings, client_factory=_never_called).generate_recommendations(answers).value
    assert len(recs) >= 5
    assert sum(1 for r in recs if r.priority == "high") >= 2


# --- Results stage concurrency ---

def test_generate_results_issues_both_calls_concurrently(keyed_settings, valid_recommendations_json):
    barrier = threading.Barrier(2, timeout=5)
    inner = route_by_prompt(analysis="## Analysis", recommendations=valid_recommendations_json)

    def handler(prompt):
        # Both calls must be in flight at the same time to get past the barrier
        barrier.wait()
        return inner(prompt)

    orchestrator = AIOrchestrator(keyed_settings, client_factory=scripted_factory(handler))
    analysis, recommendations = orchestrator.generate_results(ANSWERS)

    assert analysis.advisory is None
    assert analysis.value == "## Analysis"
    assert recommendations.advisory is None
    assert len(recommendations.value) == 5


def test_generate_results_applies_fallbacks_independently(keyed_settings):
    factory = scripted_factory(route_by_prompt(analysis="## Fine", recommendations="not json"))
    analysis, recommendations = AIOrchestrator(keyed_settings, client_factory=factory).generate_results(ANSWERS)

    assert analysis.value == "## Fine"
    assert analysis.advisory is None
    assert recommendations.value == fallback_recommendations()
    assert recommendations.advisory.kind == ADVISORY_SCHEMA
