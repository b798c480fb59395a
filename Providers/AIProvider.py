import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Literal

# Types for better code hints
SiteCategory = Literal["productive", "neutral", "distracting"]
DistractionLevel = Literal["low", "medium", "high"]

VALID_CATEGORIES = ("productive", "neutral", "distracting")
VALID_LEVELS = ("low", "medium", "high")


class ProviderType(Enum):
    """Enumeration of the scoring back ends a user can select."""
    MOCK = "mock"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    GROQ = "groq"


class ProviderError(Exception):
    """An external provider call failed or answered with something unusable"""
    pass


CLASSIFY_SYSTEM_PROMPT = """You are a productivity analyzer. Classify websites as productive, neutral, or distracting for work/study.

Return JSON with:
- category: "productive", "neutral", or "distracting"
- score: 0-100 (0=very distracting, 50=neutral, 100=very productive)
- reasoning: Brief explanation

Examples:
- github.com: productive (coding/collaboration)
- youtube.com: distracting (entertainment)
- gmail.com: neutral (necessary communication)
- stackoverflow.com: productive (learning/problem-solving)"""

FOCUS_SYSTEM_PROMPT = """You are a focus and productivity analyzer. Calculate an adaptive focus score (0-100) based on multiple factors.

Return JSON with:
- focusScore (0-100): Adaptive score considering ALL factors
- reasoning: Brief explanation of score calculation
- suggestions: Array of 2-3 actionable tips
- distractionLevel: 'low', 'medium', or 'high'

Scoring factors (weighted):
1. Website type (40%): Productive tools/docs = high, entertainment/social = low
2. Time on site (25%): Longer focused time = higher score
3. Tab switching (20%): Frequent switching = lower score
4. Session context (15%): Overall session behavior"""


class AIProvider(ABC):
    """Abstract base class for AI providers"""

    def __init__(self, api_key: str, model_name: str = None, timeout: int = 30, base_url: str = None):
        if not api_key:
            raise ProviderError(f"{type(self).__name__} requires an API key")
        self.api_key = api_key
        self.model_name = model_name or self.default_model
        self.timeout = timeout
        self.base_url = base_url or self.default_base_url

    default_model = ""
    default_base_url = ""

    @abstractmethod
    def complete_json(self, system_prompt: str, user_prompt: str,
                      max_tokens: int, temperature: float) -> Dict[str, Any]:
        """Send one prompt and return the model's answer parsed as a JSON object."""
        pass

    def classify_website(self, url: str, domain: str) -> Dict[str, Any]:
        prompt = f"""Classify this website for productivity:

Domain: {domain}
Full URL: {url}

Is this website productive, neutral, or distracting for work/study?"""
        answer = self.complete_json(CLASSIFY_SYSTEM_PROMPT, prompt, max_tokens=150, temperature=0.3)
        category = answer.get("category")
        if category not in VALID_CATEGORIES:
            raise ProviderError(f"Unexpected category in classification: {category!r}")
        return {
            "category": category,
            "score": _bounded_score(answer.get("score", 50)),
            "reasoning": answer.get("reasoning") or "Classification complete",
        }

    def analyze_focus(self, request) -> Dict[str, Any]:
        minutes, seconds = divmod(int(request.time_on_current_site), 60)
        prompt = f"""Calculate adaptive focus score:

Current URL: {request.current_url}
Time on current site: {minutes}m {seconds}s
Tab switches since last check: {request.tab_switch_count}
Total session duration: {int(request.session_duration // 60)} minutes
Historical distraction visits: {request.distraction_site_visits}

Calculate a nuanced score that reflects BOTH the site type AND the user's behavior."""
        answer = self.complete_json(FOCUS_SYSTEM_PROMPT, prompt, max_tokens=300, temperature=0.7)
        if "focusScore" not in answer:
            raise ProviderError("Focus analysis is missing focusScore")
        level = answer.get("distractionLevel", "medium")
        suggestions = answer.get("suggestions") or []
        if not isinstance(suggestions, list):
            raise ProviderError("Focus analysis suggestions must be a list")
        return {
            "focus_score": _bounded_score(answer["focusScore"]),
            "reasoning": answer.get("reasoning") or "Analysis complete",
            "suggestions": [str(s) for s in suggestions][:3],
            "distraction_level": level if level in VALID_LEVELS else "medium",
        }

    def test_connection(self) -> str:
        answer = self.complete_json(
            "Reply with a JSON object.",
            'Return {"status": "API test successful"} if you can read this.',
            max_tokens=20, temperature=0.0,
        )
        return str(answer.get("status", answer))


def parse_json_answer(text: str) -> Dict[str, Any]:
    """Parses a model answer, tolerating a markdown code fence around the JSON."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.startswith("json"):
            cleaned = cleaned[4:]
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Answer is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ProviderError("Answer is not a JSON object")
    return parsed


def _bounded_score(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        raise ProviderError(f"Score is not a number: {value!r}") from None
    return max(0.0, min(100.0, score))
