# distraction_classifier.py
import logging
import time
from typing import Callable, List, Optional

import config
from config_manager import DEFAULT_CLASSIFICATION_RULES
from models import WebsiteClassification
from utils import extract_domain, pattern_matches, url_path

logger = logging.getLogger(__name__)


class DistractionClassifier:
    """
    Classifies websites as productive, neutral or distracting:
    1. Cached classification for the domain (kept for 7 days)
    2. External AI provider, when one is configured and allowed
    3. Static rule table (always available, never fails)
    """

    def __init__(self, store, ai_provider=None, rules=None,
                 use_cache: bool = True,
                 cache_duration: float = config.CLASSIFICATION_CACHE_DURATION,
                 clock: Callable[[], float] = time.time):
        self.store = store
        self.ai_provider = ai_provider
        self.rules = rules or DEFAULT_CLASSIFICATION_RULES
        self.use_cache = use_cache
        self.cache_duration = cache_duration
        self.clock = clock

    def classify(self, url: str, allow_external: bool = True) -> WebsiteClassification:
        """
        Classify a URL. Scoring ticks pass allow_external=False so that no
        network call sits on their path; tab changes warm the cache instead.
        """
        url = url or ""
        domain = extract_domain(url) or url

        if self.use_cache:
            cached = self.get_cached(domain)
            if cached:
                return cached

        if allow_external and self.ai_provider is not None:
            try:
                answer = self.ai_provider.classify_website(url, domain)
                classification = WebsiteClassification(
                    url=url,
                    domain=domain,
                    category=answer["category"],
                    score=answer["score"],
                    reasoning=answer["reasoning"],
                    timestamp=self.clock(),
                )
                if self.use_cache:
                    self.cache(classification)
                return classification
            except Exception as e:
                logger.error(f"Website classification error for {domain}: {e}")

        return self.heuristic_classification(url, domain)

    def heuristic_classification(self, url: str, domain: str) -> WebsiteClassification:
        path = url_path(url)

        for category, score, reasoning, patterns in self.rules:
            if any(pattern_matches(p, domain, path) for p in patterns):
                return WebsiteClassification(url, domain, category, score, reasoning, self.clock())

        # Default to neutral for unknown sites
        return WebsiteClassification(
            url, domain, "neutral", config.DEFAULT_NEUTRAL_SCORE,
            "Unknown website, classified as neutral", self.clock()
        )

    # --- Cache ---

    def get_cached(self, domain: str) -> Optional[WebsiteClassification]:
        try:
            cache = self.store.get(config.WEBSITE_CLASSIFICATIONS)
            entry = cache.get(domain)
            if entry and self.clock() - entry.get("timestamp", 0) < self.cache_duration:
                return WebsiteClassification.from_dict(entry)
        except Exception as e:
            logger.error(f"Error reading classification cache: {e}")
        return None

    def cache(self, classification: WebsiteClassification) -> None:
        def _put(cache):
            cache[classification.domain] = classification.to_dict()
            return cache

        try:
            self.store.update(config.WEBSITE_CLASSIFICATIONS, _put)
        except Exception as e:
            logger.error(f"Error caching classification: {e}")

    def purge_expired(self) -> int:
        """Drops cache entries older than the retention window. Returns how many went."""
        purged: List[str] = []

        def _purge(cache):
            purged.clear()
            now = self.clock()
            for domain, entry in list(cache.items()):
                if now - entry.get("timestamp", 0) >= self.cache_duration:
                    purged.append(domain)
                    del cache[domain]
            return cache if purged else None

        self.store.update(config.WEBSITE_CLASSIFICATIONS, _purge)
        if purged:
            logger.info(f"Purged {len(purged)} expired classifications")
        return len(purged)

    def clear_cache(self) -> None:
        self.store.remove(config.WEBSITE_CLASSIFICATIONS)
