import logging
from typing import Dict, List, Optional

from groq import AsyncGroq
from google import genai

from ..core.config import settings
from ..core.exceptions import ExternalServiceFailure

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("groq", "gemini")


class LLMService:
    """
    Service for one-shot calls to an LLM provider (Groq or Google Gemini).

    The API key is supplied per call and never stored. Each call makes a
    single attempt; any provider error is raised as ExternalServiceFailure.
    """

    def __init__(self, groq_model: Optional[str] = None, gemini_model: Optional[str] = None):
        self.groq_model = groq_model or settings.GROQ_MODEL
        self.gemini_model = gemini_model or settings.GEMINI_MODEL

    async def _call_groq(
            self,
            api_key: str,
            messages: List[Dict[str, str]],
            temperature: float,
            max_tokens: int
    ) -> str:
        client = AsyncGroq(api_key=api_key)
        response = await client.chat.completions.create(
            model=self.groq_model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens
        )
        return response.choices[0].message.content

    async def _call_gemini(
            self,
            api_key: str,
            messages: List[Dict[str, str]],
            temperature: float,
            max_tokens: int
    ) -> str:
        """Call Gemini using the google-genai SDK."""
        # Convert messages to Gemini format
        prompt_parts = []
        for msg in messages:
            if msg["role"] == "system":
                prompt_parts.append(f"Instructions: {msg['content']}\n\n")
            elif msg["role"] == "user":
                prompt_parts.append(msg["content"])

        client = genai.Client(api_key=api_key)
        response = await client.aio.models.generate_content(
            model=self.gemini_model,
            contents="".join(prompt_parts),
            config={
                "temperature": temperature,
                "max_output_tokens": max_tokens
            }
        )
        return response.text

    async def generate(
            self,
            prompt: str,
            api_key: str,
            provider: Optional[str] = None,
            system_prompt: Optional[str] = None,
            temperature: float = 0.2,
            max_tokens: int = 2000
    ) -> str:
        """Generate a completion from the chosen provider."""
        provider = (provider or settings.EXTERNAL_EXTRACTION_PROVIDER).lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ExternalServiceFailure(f"Unsupported LLM provider: {provider}")
        if not api_key:
            raise ExternalServiceFailure("No API key supplied for the external extraction layer")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug("Sending one %s request (%d prompt chars)", provider, len(prompt))
        try:
            if provider == "groq":
                result = await self._call_groq(api_key, messages, temperature, max_tokens)
            else:
                result = await self._call_gemini(api_key, messages, temperature, max_tokens)
        except Exception as e:
            # Provider SDKs raise their own transport/auth error types
            raise ExternalServiceFailure(f"{provider} request failed: {e}") from e

        if not result:
            raise ExternalServiceFailure(f"{provider} returned an empty response")
        return result

    async def generate_json(
            self,
            prompt: str,
            api_key: str,
            provider: Optional[str] = None,
            system_prompt: Optional[str] = None,
            temperature: float = 0.1
    ) -> str:
        """
        Generate a JSON response from the LLM.
        Uses lower temperature for more deterministic output.
        """
        json_system = (system_prompt or "") + "\n\nRespond ONLY with valid JSON. No explanations or markdown."
        return await self.generate(prompt, api_key, provider, json_system, temperature)


# Singleton instance
llm_service = LLMService()
