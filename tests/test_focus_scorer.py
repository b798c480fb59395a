"""Tests for the focus scoring strategies."""

import pytest

from distraction_classifier import DistractionClassifier
from focus_scorer import (
    ExternalFocusStrategy,
    FocusScorer,
    HeuristicFocusStrategy,
    distraction_level_for,
    dwell_time_score,
    session_quality_score,
    tab_switch_score,
)
from models import FocusAnalysisRequest
from Providers.AIProvider import ProviderError


@pytest.fixture
def classifier(store, clock):
    return DistractionClassifier(store, clock=clock)


@pytest.mark.parametrize("seconds, expected", [
    (0, 30), (30, 30), (31, 45), (121, 60), (301, 75), (601, 85), (901, 95),
])
def test_dwell_time_steps(seconds, expected):
    assert dwell_time_score(seconds) == expected


@pytest.mark.parametrize("switches, expected", [
    (0, 90), (10, 90), (11, 75), (16, 65), (21, 50), (31, 30),
])
def test_tab_switch_steps(switches, expected):
    assert tab_switch_score(switches) == expected


def test_session_quality():
    assert session_quality_score(31 * 60, 2) == 90
    assert session_quality_score(31 * 60, 3) == 70
    assert session_quality_score(10 * 60, 6) == 40
    assert session_quality_score(10 * 60, 0) == 70


def test_distraction_levels():
    assert distraction_level_for(71) == "low"
    assert distraction_level_for(70) == "medium"
    assert distraction_level_for(41) == "medium"
    assert distraction_level_for(40) == "high"


def test_heuristic_deep_work(classifier):
    request = FocusAnalysisRequest(
        current_url="https://github.com/pallets/flask",
        tab_switch_count=3,
        time_on_current_site=12 * 60,
        session_duration=40 * 60,
        distraction_site_visits=1,
    )

    analysis = HeuristicFocusStrategy(classifier).score(request)

    # 85*0.40 + 85*0.25 + 90*0.20 + 90*0.15 = 86.75
    assert analysis.focus_score == 87
    assert analysis.distraction_level == "low"
    assert analysis.source == "heuristic"
    assert "Excellent deep focus! You're in the zone." in analysis.suggestions
    assert "Great focus stability with minimal tab switching!" in analysis.suggestions


def test_heuristic_distracted(classifier):
    request = FocusAnalysisRequest(
        current_url="https://www.youtube.com/watch?v=1",
        tab_switch_count=25,
        time_on_current_site=6 * 60,
        session_duration=20 * 60,
        distraction_site_visits=6,
    )

    analysis = HeuristicFocusStrategy(classifier).score(request)

    # 20*0.40 + 75*0.25 + 50*0.20 + 40*0.15 = 42.75
    assert analysis.focus_score == 43
    assert analysis.distraction_level == "medium"
    assert 1 <= len(analysis.suggestions) <= 3
    assert any("youtube.com" in s for s in analysis.suggestions)


def test_heuristic_scores_are_bounded(classifier):
    for switches in (0, 15, 50):
        for dwell in (0, 200, 5000):
            analysis = HeuristicFocusStrategy(classifier).score(FocusAnalysisRequest(
                current_url="https://example.org", tab_switch_count=switches,
                time_on_current_site=dwell, session_duration=dwell,
            ))
            assert 0 <= analysis.focus_score <= 100


def test_external_strategy_uses_provider(classifier, make_provider):
    provider = make_provider(focus={"focus_score": 64, "reasoning": "ok", "suggestions": ["a", "b"],
                                    "distraction_level": "medium"})
    strategy = ExternalFocusStrategy(provider, HeuristicFocusStrategy(classifier))

    analysis = strategy.score(FocusAnalysisRequest(current_url="https://github.com"))

    assert analysis.focus_score == 64
    assert analysis.suggestions == ["a", "b"]
    assert analysis.source == "FakeProvider"


@pytest.mark.parametrize("error", [ProviderError("bad answer"), TimeoutError("slow"), KeyError("focus_score")])
def test_external_failure_falls_back_silently(classifier, make_provider, error):
    strategy = ExternalFocusStrategy(make_provider(error=error), HeuristicFocusStrategy(classifier))

    analysis = strategy.score(FocusAnalysisRequest(current_url="https://github.com"))

    assert analysis.source == "heuristic"
    assert 0 <= analysis.focus_score <= 100


def test_malformed_external_answer_falls_back(classifier, make_provider):
    provider = make_provider(focus={"reasoning": "no score here"})
    strategy = ExternalFocusStrategy(provider, HeuristicFocusStrategy(classifier))

    assert strategy.score(FocusAnalysisRequest()).source == "heuristic"


def test_scorer_selects_strategy_at_construction(classifier, make_provider):
    assert FocusScorer(classifier).uses_external is False
    assert FocusScorer(classifier, provider=make_provider()).uses_external is True


def test_scorer_accepts_missing_request(classifier):
    analysis = FocusScorer(classifier).score(None)
    assert 0 <= analysis.focus_score <= 100
