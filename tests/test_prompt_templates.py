"""
Tests for Prompt Templates and the LLM response parser.
"""

import pytest

from app.llm.prompt_templates import METHODOLOGY_CONTEXT, PROMPT_TEMPLATES, build_prompt, check_params
from app.llm.response_parser import extract_numbered_items, extract_score, parse_markdown_sections


def test_every_template_shares_methodology():
    params = {
        "c1_phase_review": {"phase_num": 1, "phase_title": "Domain Context"},
        "c3_bias_analysis": {"bias_type": "Historical"},
        "chat": {"component": "Component 3"},
    }
    for name in PROMPT_TEMPLATES:
        prompt = build_prompt(name, context="ctx", inputs="inputs", **params.get(name, {}))
        assert prompt.system.startswith(METHODOLOGY_CONTEXT)


def test_phase_review_parameters():
    prompt = build_prompt("c1_phase_review", inputs="System: Robodebt", phase_num=2, phase_title="Data")
    assert prompt.system.endswith("You are reviewing Phase 2 (Data) of the Historical Context Assessment.")
    assert prompt.user.startswith("Here is the auditor's work for Phase 2 - Data:\n\nSystem: Robodebt\n\n")


def test_context_placed_before_inputs():
    prompt = build_prompt("c2_selection_review", context="UPSTREAM", inputs="SELECTION")
    assert prompt.user.startswith("Prior findings:\nUPSTREAM\n\nSelection:\nSELECTION\n\n")


def test_metrics_recommendation_includes_mapping():
    prompt = build_prompt("c4_metrics_recommendation", context="ctx")
    assert "- Deployment bias → Outcome Drift, Appeal Rate by Group" in prompt.user


def test_chat_uses_question_as_user_prompt():
    prompt = build_prompt("chat", context="", inputs="What is SPD?", component="c4")
    assert prompt.user == "What is SPD?"
    assert "follow-up conversation about c4" in prompt.system
    assert "Audit findings so far" not in prompt.system


def test_unknown_template():
    with pytest.raises(KeyError):
        build_prompt("c5_everything")


def test_missing_parameters():
    with pytest.raises(TypeError):
        build_prompt("c3_bias_analysis", context="ctx", inputs="evidence")


def test_check_params():
    check_params("c3_bias_analysis", {"bias_type": "Historical"})
    check_params("c4_recommendations", {})
    with pytest.raises(TypeError):
        check_params("c3_bias_analysis", {})
    with pytest.raises(TypeError):
        check_params("c4_recommendations", {"bias_type": "Historical"})
    with pytest.raises(KeyError):
        check_params("c5_everything", {})


def test_parse_markdown_sections():
    text = "Intro line\n## Assessment\nGood.\n\n### Gaps\n1. Missing appeals\n2. No pilot\n"
    sections = parse_markdown_sections(text)
    assert [(s.heading, s.content) for s in sections] == [
        ("", "Intro line"),
        ("Assessment", "Good."),
        ("Gaps", "1. Missing appeals\n2. No pilot"),
    ]
    assert sections[2].items == ["Missing appeals", "No pilot"]
    assert sections[1].items == []


def test_extract_numbered_items():
    assert extract_numbered_items("1. First\n  2.  Second \n- bullet\n3.missing space") == ["First", "Second"]


def test_extract_score():
    assert extract_score("Suggested severity: 4/5 given the evidence", "Severity") == 4
    assert extract_score("I'd rate this 3/5 - Scope", "scope") == 3
    assert extract_score("No numbers here", "Severity") is None
