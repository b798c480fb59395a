# config_manager.py
import logging
from typing import Any, Dict, List, Optional

import config
from models import APIConfig, DistractionSite
from Providers.AIProvider import ProviderType
from utils import domain_matches

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised for configuration values outside the enumerated options"""
    pass


# --- Defaults ---

DEFAULT_DISTRACTION_SITES = [
    DistractionSite('youtube.com', True, 0.15),
    DistractionSite('facebook.com', True, 0.12),
    DistractionSite('instagram.com', True, 0.12),
    DistractionSite('twitter.com', True, 0.10),
    DistractionSite('x.com', True, 0.10),
    DistractionSite('reddit.com', True, 0.08),
    DistractionSite('tiktok.com', True, 0.15),
    DistractionSite('netflix.com', True, 0.20),
    DistractionSite('twitch.tv', True, 0.12),
    DistractionSite('discord.com', True, 0.08),
]

# Ordered: the first list with a matching pattern wins. Pattern forms are
# described in utils.pattern_matches.
DEFAULT_CLASSIFICATION_RULES = [
    ("productive", 85, "Identified as a productive/educational website", [
        'github.com', 'gitlab.com', 'stackoverflow.com', 'stackexchange.com',
        'docs.', 'developer.', 'learn.', 'education', 'coursera', 'udemy',
        'notion.so', 'trello.com', 'asana.com', 'monday.com',
        'google.com/docs', 'google.com/sheets', 'google.com/slides',
        'overleaf.com', 'latex', 'jupyter', 'colab.research.google.com',
        'medium.com', 'dev.to', 'hackernoon', 'freecodecamp',
    ]),
    ("distracting", 20, "Identified as an entertainment/social media website", [
        'youtube.com', 'youtu.be', 'facebook.com', 'fb.com',
        'instagram.com', 'twitter.com', 'x.com', 'tiktok.com',
        'reddit.com', 'twitch.tv', 'netflix.com', 'hulu.com',
        'discord.com', 'snapchat.com', 'pinterest.com',
        'buzzfeed', 'dailymail', 'tmz.com', 'espn.com',
    ]),
    ("neutral", 50, "Identified as a necessary communication/utility tool", [
        'gmail.com', 'outlook.com', 'mail.', 'calendar.',
        'zoom.us', 'meet.google.com', 'teams.microsoft.com',
        'slack.com', 'amazon.com', 'google.com/search',
    ]),
]

#region API CONFIG
# --- API configuration ---

def validate_provider(provider: str) -> str:
    try:
        return ProviderType(provider).value
    except ValueError:
        options = ", ".join(p.value for p in ProviderType)
        raise ConfigError(f"Unknown provider '{provider}'. Choose one of: {options}") from None


def get_api_config(store) -> APIConfig:
    return store.api_config()


def set_api_config(store, api_config: APIConfig) -> None:
    validate_provider(api_config.provider)
    store.set(config.API_CONFIG, api_config.to_dict())
    logger.info(f"API config saved (provider: {api_config.provider})")


def update_api_config(store, **updates: Any) -> APIConfig:
    """Updates selected fields of the API config. Only known fields are accepted."""
    allowed = {'provider', 'api_key', 'base_url', 'use_cache', 'timeout'}
    unknown = set(updates) - allowed
    if unknown:
        raise ConfigError(f"Unknown config fields: {', '.join(sorted(unknown))}")
    if 'provider' in updates:
        updates['provider'] = validate_provider(updates['provider'])
    if 'use_cache' in updates and not isinstance(updates['use_cache'], bool):
        raise ConfigError("use_cache must be true or false")

    merged = store.merge(config.API_CONFIG, updates)
    logger.info(f"API config updated: {sorted(updates)}")
    return APIConfig.from_dict(merged)
#endregion

#region SITES
# --- Distraction site CRUD ---

def get_distraction_sites(store) -> List[DistractionSite]:
    return [DistractionSite.from_dict(s) for s in store.get(config.DISTRACTION_SITES)]


def find_distraction_site(store, hostname: str) -> Optional[DistractionSite]:
    """Returns the first enabled site matching the hostname or one of its parent domains."""
    if not hostname:
        return None
    for site in get_distraction_sites(store):
        if site.enabled and domain_matches(hostname, site.domain):
            return site
    return None


def add_distraction_site(store, domain: str, penalty: float = 0.1) -> bool:
    """Adds a distraction site. Returns False when it already exists."""
    if not 0 <= penalty <= 1:
        raise ConfigError(f"Penalty must be between 0 and 1, got {penalty}")
    added = []

    def _add(sites: List[Dict]) -> Optional[List[Dict]]:
        added.clear()
        if any(s['domain'] == domain for s in sites):
            return None
        added.append(domain)
        return sites + [DistractionSite(domain, True, penalty).to_dict()]

    store.update(config.DISTRACTION_SITES, _add)
    if not added:
        logger.warning(f"Distraction site '{domain}' already exists.")
        return False
    logger.info(f"Distraction site '{domain}' added.")
    return True


def remove_distraction_site(store, domain: str) -> bool:
    removed = []

    def _remove(sites: List[Dict]) -> Optional[List[Dict]]:
        removed.clear()
        remaining = [s for s in sites if s['domain'] != domain]
        if len(remaining) == len(sites):
            return None
        removed.append(domain)
        return remaining

    store.update(config.DISTRACTION_SITES, _remove)
    if not removed:
        logger.warning(f"Distraction site '{domain}' not found.")
        return False
    logger.info(f"Distraction site '{domain}' removed.")
    return True


def toggle_distraction_site(store, domain: str, enabled: bool) -> bool:
    found = []

    def _toggle(sites: List[Dict]) -> Optional[List[Dict]]:
        found.clear()
        for site in sites:
            if site['domain'] == domain:
                site['enabled'] = enabled
                found.append(domain)
                return sites
        return None

    store.update(config.DISTRACTION_SITES, _toggle)
    if not found:
        logger.warning(f"Distraction site '{domain}' not found.")
        return False
    logger.info(f"Distraction site '{domain}' {'enabled' if enabled else 'disabled'}.")
    return True
#endregion
