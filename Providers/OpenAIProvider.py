import requests
from .AIProvider import AIProvider, ProviderError, parse_json_answer


class OpenAIProvider(AIProvider):
    """OpenAI GPT provider"""

    default_model = "gpt-4o-mini"
    default_base_url = "https://api.openai.com/v1/chat/completions"

    def complete_json(self, system_prompt, user_prompt, max_tokens, temperature):
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "response_format": {"type": "json_object"},
            "temperature": temperature,
            "max_tokens": max_tokens
        }

        try:
            response = requests.post(self.base_url, headers=headers, json=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
            answer = result['choices'][0]['message']['content']
        except requests.RequestException as e:
            raise ProviderError(f"OpenAI request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed OpenAI response: {e}") from e
        return parse_json_answer(answer)
