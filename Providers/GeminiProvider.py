import requests
from .AIProvider import AIProvider, ProviderError, parse_json_answer


class GeminiProvider(AIProvider):
    """Google Gemini provider"""

    default_model = "gemini-1.5-flash-latest"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta/models"

    def complete_json(self, system_prompt, user_prompt, max_tokens, temperature):
        url = f"{self.base_url}/{self.model_name}:generateContent"
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key
        }

        data = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{
                "parts": [{"text": user_prompt}]
            }],
            "generationConfig": {
                "maxOutputTokens": max_tokens,
                "temperature": temperature,
                "responseMimeType": "application/json"
            }
        }

        try:
            response = requests.post(url, headers=headers, json=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
            answer = result['candidates'][0]['content']['parts'][0]['text']
        except requests.RequestException as e:
            raise ProviderError(f"Gemini request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed Gemini response: {e}") from e
        return parse_json_answer(answer)
