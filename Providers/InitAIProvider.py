#initAiProvider.py
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Type

from Providers.AIProvider import AIProvider, ProviderError, ProviderType
from Providers.AnthropicProvider import AnthropicProvider
from Providers.GeminiProvider import GeminiProvider
from Providers.GroqProvider import GroqProvider
from Providers.OpenAIProvider import OpenAIProvider

logger = logging.getLogger(__name__)


@dataclass
class ProviderConfig:
    """Everything needed to build one HTTP provider."""
    provider_type: ProviderType
    api_key: str
    model_name: Optional[str] = None
    base_url: Optional[str] = None
    timeout: int = 30


# provider type -> (class, environment variable holding its key)
_REGISTRY: Dict[ProviderType, Tuple[Type[AIProvider], str]] = {
    ProviderType.OPENAI: (OpenAIProvider, "OPENAI_API_KEY"),
    ProviderType.ANTHROPIC: (AnthropicProvider, "ANTHROPIC_API_KEY"),
    ProviderType.GEMINI: (GeminiProvider, "GEMINI_API_KEY"),
    ProviderType.GROQ: (GroqProvider, "GROQ_API_KEY"),
}


def env_var_for(provider_type: ProviderType) -> str:
    return _REGISTRY[provider_type][1]


class AIProviderManager:
    """Builds the scoring back end selected in the API config and remembers what it built."""

    def __init__(self):
        self._providers: Dict[ProviderType, AIProvider] = {}

    def create_provider(self, provider_config: ProviderConfig) -> AIProvider:
        """
        Raises:
            ValueError: for the mock provider or an unregistered type
            ProviderError: when the key is empty
        """
        entry = _REGISTRY.get(provider_config.provider_type)
        if entry is None:
            raise ValueError(f"No HTTP provider for '{provider_config.provider_type.value}'")

        provider_class = entry[0]
        provider = provider_class(
            provider_config.api_key,
            model_name=provider_config.model_name,
            timeout=provider_config.timeout,
            base_url=provider_config.base_url,
        )
        self._providers[provider_config.provider_type] = provider
        logger.info(f"{provider_config.provider_type.value} provider ready ({provider.model_name})")
        return provider

    def get_provider(self, provider_type: ProviderType) -> Optional[AIProvider]:
        return self._providers.get(provider_type)

    def from_api_config(self, api_config) -> Optional[AIProvider]:
        """
        Build the provider selected by the stored API config.

        Returns None for the mock provider. A missing key falls back to the
        provider's environment variable; without either, None is returned and
        the caller stays on the heuristic.
        """
        try:
            provider_type = ProviderType(api_config.provider)
        except ValueError:
            logger.error(f"Unknown provider '{api_config.provider}' in config, using heuristic scoring")
            return None
        if provider_type == ProviderType.MOCK:
            return None

        api_key = api_config.api_key or os.getenv(env_var_for(provider_type), "")
        if not api_key:
            logger.warning(f"No API key for {provider_type.value}, using heuristic scoring")
            return None

        try:
            return self.create_provider(ProviderConfig(
                provider_type=provider_type,
                api_key=api_key,
                base_url=api_config.base_url,
                timeout=api_config.timeout,
            ))
        except ProviderError as e:
            logger.error(f"Could not build the {provider_type.value} provider: {e}")
            return None

    @classmethod
    def from_environment(cls, provider_type: ProviderType) -> AIProvider:
        """Builds a provider from the key in its environment variable (OPENAI_API_KEY, ...)."""
        variable = env_var_for(provider_type)
        api_key = os.getenv(variable)
        if not api_key:
            raise ValueError(f"Environment variable {variable} not found")
        return cls().create_provider(ProviderConfig(provider_type=provider_type, api_key=api_key))

    @staticmethod
    def list_available_providers() -> List[str]:
        return [provider.value for provider in ProviderType]

    def list_initialized_providers(self) -> List[str]:
        return [provider.value for provider in self._providers]
