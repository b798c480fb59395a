from .OpenAIProvider import OpenAIProvider


class GroqProvider(OpenAIProvider):
    """Groq provider (fast inference, OpenAI-compatible API)"""

    default_model = "llama-3.1-8b-instant"
    default_base_url = "https://api.groq.com/openai/v1/chat/completions"
