"""
Gemini API client
Thin async wrapper around google-genai
"""

from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ai.errors import AIAuthError, AIError, AIResponseError, classify_error
from utils.logger import get_logger

DEFAULT_MODEL = "gemini-2.5-flash"

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def build_generation_config() -> types.GenerateContentConfig:
    """Sampling and safety settings used for every request."""
    return types.GenerateContentConfig(
        temperature=0.7,
        top_k=40,
        top_p=0.8,
        max_output_tokens=1000,
        safety_settings=[
            types.SafetySetting(
                category=category,
                threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            )
            for category in SAFETY_CATEGORIES
        ],
    )


class GeminiClient:
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, client: Optional[genai.Client] = None):
        if not api_key:
            raise AIAuthError("Gemini API key not provided")
        self.model = model
        self.client = client or genai.Client(api_key=api_key)
        self.generation_config = build_generation_config()
        self.logger = get_logger("GeminiClient")

    async def generate_response(self, prompt: str) -> str:
        """
        Send a single-turn prompt and return the text answer.

        Raises:
            AIError: On API, network or empty-answer failures
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self.generation_config,
            )
        except genai_errors.APIError as e:
            self.logger.error(f"Gemini API error {e.code}: {e.message}")
            raise classify_error(e) from e
        except AIError:
            raise
        except Exception as e:
            self.logger.error(f"Error in GeminiClient.generate_response: {e}")
            raise classify_error(e) from e

        text = getattr(response, "text", None)
        if not text:
            raise AIResponseError("No valid response from Gemini API")
        return text

    async def test_connection(self) -> bool:
        try:
            await self.generate_response("Hello, respond with 'OK' if you can hear me.")
            return True
        except AIError as e:
            self.logger.warning(f"Gemini connection test failed: {e}")
            return False
