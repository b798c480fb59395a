import requests
from .AIProvider import AIProvider, ProviderError, parse_json_answer


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider"""

    default_model = "claude-3-haiku-20240307"
    default_base_url = "https://api.anthropic.com/v1/messages"

    def complete_json(self, system_prompt, user_prompt, max_tokens, temperature):
        headers = {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "anthropic-version": "2023-06-01"
        }

        data = {
            "model": self.model_name,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system_prompt + "\nRespond with the JSON object only.",
            "messages": [{"role": "user", "content": user_prompt}]
        }

        try:
            response = requests.post(self.base_url, headers=headers, json=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
            answer = result['content'][0]['text']
        except requests.RequestException as e:
            raise ProviderError(f"Anthropic request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed Anthropic response: {e}") from e
        return parse_json_answer(answer)
