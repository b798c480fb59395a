# focus_scorer.py
import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional

from models import FocusAnalysis, FocusAnalysisRequest, WebsiteClassification
from utils import clamp

logger = logging.getLogger(__name__)

SITE_WEIGHT = 0.40
DWELL_WEIGHT = 0.25
SWITCH_WEIGHT = 0.20
SESSION_WEIGHT = 0.15


def dwell_time_score(seconds_on_site: float) -> int:
    """Longer uninterrupted time on one site reads as deeper focus."""
    minutes = seconds_on_site / 60
    if minutes > 15:
        return 95
    if minutes > 10:
        return 85
    if minutes > 5:
        return 75
    if minutes > 2:
        return 60
    if minutes > 0.5:
        return 45
    return 30  # just arrived


def tab_switch_score(switches: int) -> int:
    """Only excessive switching is penalized; up to 10 switches is normal work."""
    if switches > 30:
        return 30
    if switches > 20:
        return 50
    if switches > 15:
        return 65
    if switches > 10:
        return 75
    return 90


def session_quality_score(session_seconds: float, distraction_visits: int) -> int:
    if session_seconds / 60 > 30 and distraction_visits < 3:
        return 90
    if distraction_visits > 5:
        return 40
    return 70


def distraction_level_for(score: float) -> str:
    if score > 70:
        return "low"
    if score > 40:
        return "medium"
    return "high"


class FocusStrategy(ABC):
    """One way of turning focus signals into a FocusAnalysis."""

    @abstractmethod
    def score(self, request: FocusAnalysisRequest) -> FocusAnalysis:
        pass


class HeuristicFocusStrategy(FocusStrategy):
    """Weighted sum of site, dwell time, tab switching and session quality. Never fails."""

    def __init__(self, classifier):
        self.classifier = classifier

    def score(self, request: FocusAnalysisRequest) -> FocusAnalysis:
        classification = self.classifier.classify(request.current_url, allow_external=False)

        site = classification.score
        dwell = dwell_time_score(request.time_on_current_site)
        switches = tab_switch_score(request.tab_switch_count)
        session = session_quality_score(request.session_duration, request.distraction_site_visits)

        weighted = (site * SITE_WEIGHT + dwell * DWELL_WEIGHT
                    + switches * SWITCH_WEIGHT + session * SESSION_WEIGHT)
        final_score = clamp(math.floor(weighted + 0.5), 0, 100)

        minutes_on_site = request.time_on_current_site / 60
        reasoning = (
            f"Site: {classification.category} ({site:g}/100). "
            f"Time: {int(minutes_on_site)}m ({dwell}/100). "
            f"Switches: {request.tab_switch_count} ({switches}/100). "
            f"Overall: {final_score:g}/100"
        )
        return FocusAnalysis(
            focus_score=final_score,
            distraction_level=distraction_level_for(final_score),
            reasoning=reasoning,
            suggestions=self._suggestions(request, classification, minutes_on_site),
            source="heuristic",
        )

    def _suggestions(self, request: FocusAnalysisRequest,
                     classification: WebsiteClassification, minutes_on_site: float) -> List[str]:
        suggestions = []

        if minutes_on_site < 2 and classification.category == "productive":
            suggestions.append("Good site choice! Try to stay focused here for at least 5 minutes.")
        elif minutes_on_site > 10 and classification.category == "productive":
            suggestions.append("Excellent deep focus! You're in the zone.")

        if request.tab_switch_count > 20:
            suggestions.append(f"{request.tab_switch_count} tab switches is quite high. Try to focus on fewer tasks.")
        elif request.tab_switch_count > 15:
            suggestions.append("Moderate tab switching detected. Consider focusing on one task at a time.")
        elif request.tab_switch_count < 5:
            suggestions.append("Great focus stability with minimal tab switching!")

        if classification.category == "distracting" and minutes_on_site > 5:
            suggestions.append(
                f"You've been on {classification.domain} for {int(minutes_on_site)} minutes. Consider refocusing."
            )

        if not suggestions:
            suggestions.append("Maintain your current focus level.")
        return suggestions[:3]


class ExternalFocusStrategy(FocusStrategy):
    """
    Delegates to an AI provider. Any failure (timeout, malformed answer,
    missing credential) is logged and answered by the fallback strategy.
    """

    def __init__(self, provider, fallback: FocusStrategy):
        self.provider = provider
        self.fallback = fallback

    def score(self, request: FocusAnalysisRequest) -> FocusAnalysis:
        try:
            answer = self.provider.analyze_focus(request)
            focus_score = clamp(float(answer["focus_score"]), 0, 100)
            return FocusAnalysis(
                focus_score=focus_score,
                distraction_level=answer.get("distraction_level") or distraction_level_for(focus_score),
                reasoning=answer.get("reasoning", ""),
                suggestions=list(answer.get("suggestions") or []),
                source=type(self.provider).__name__,
            )
        except Exception as e:
            logger.error(f"LLM analysis error, using heuristic: {e}")
            return self.fallback.score(request)


class FocusScorer:
    """Scores focus with the strategy chosen at construction."""

    def __init__(self, classifier, provider=None):
        self.heuristic = HeuristicFocusStrategy(classifier)
        self.strategy: FocusStrategy = (
            ExternalFocusStrategy(provider, self.heuristic) if provider is not None else self.heuristic
        )

    @property
    def uses_external(self) -> bool:
        return isinstance(self.strategy, ExternalFocusStrategy)

    def score(self, request: Optional[FocusAnalysisRequest]) -> FocusAnalysis:
        return self.strategy.score(request or FocusAnalysisRequest())
