"""
LLM Provider - Supports Anthropic, OpenAI-compatible APIs and Ollama
"""
from typing import Dict, Any, Optional
import httpx
from ..config import settings, Settings
from ..exceptions import AIRequestError
from ..utils.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_PROVIDERS = ("anthropic", "openai", "ollama")


class LLMProvider:
    """Unified interface for different LLM providers"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or settings
        self.transport = transport
        self.provider = self._detect_provider()
        logger.info(f"Initialized LLM provider: {self.provider}")

    def _detect_provider(self) -> str:
        """Detect which LLM provider to use based on configuration"""
        provider = (self.config.llm_provider or "").lower()
        if provider in SUPPORTED_PROVIDERS:
            return provider

        # Fall back on whichever credentials are present
        if self.config.anthropic_api_key:
            return "anthropic"
        if self.config.openai_api_key.startswith(("sk-", "gsk_")):
            return "openai"
        return "ollama"

    @property
    def model(self) -> str:
        if self.provider == "anthropic":
            return self.config.anthropic_model
        if self.provider == "ollama":
            return self.config.ollama_model
        return self.config.openai_model

    async def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 2000,
        temperature: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Generate completion using the configured provider

        Returns:
            {
                "content": str,
                "tokens_used": int,
                "model": str,
                "provider": str
            }

        Raises:
            AIRequestError: on transport failures, timeouts and non-2xx responses
        """
        if temperature is None:
            temperature = self.config.llm_temperature

        if self.provider == "anthropic":
            return await self._anthropic_completion(prompt, system_prompt, max_tokens, temperature)
        elif self.provider == "ollama":
            return await self._ollama_completion(prompt, system_prompt, max_tokens, temperature)
        else:
            return await self._openai_compatible_completion(prompt, system_prompt, max_tokens, temperature)

    def _client(self, base_url: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=self.config.llm_timeout_seconds,
            transport=self.transport,
        )

    async def _anthropic_completion(
        self,
        prompt: str,
        system_prompt: Optional[str],
        max_tokens: int,
        temperature: float
    ) -> Dict[str, Any]:
        """Call the Anthropic Messages API"""
        if not self.config.anthropic_api_key:
            raise AIRequestError("Anthropic API key is not configured", provider="anthropic")

        payload: Dict[str, Any] = {
            "model": self.config.anthropic_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        headers = {
            "x-api-key": self.config.anthropic_api_key,
            "anthropic-version": self.config.anthropic_version,
            "content-type": "application/json",
        }

        data = await self._post_json(self.config.anthropic_base_url, "/v1/messages", payload, headers)

        blocks = data.get("content") or []
        text_blocks = [block.get("text", "") for block in blocks if block.get("type") == "text"]
        if not text_blocks:
            raise AIRequestError("No text content received from Anthropic", provider="anthropic")

        usage = data.get("usage") or {}
        return {
            "content": text_blocks[0],
            "tokens_used": usage.get("input_tokens", 0) + usage.get("output_tokens", 0),
            "model": data.get("model", self.config.anthropic_model),
            "provider": "anthropic",
        }

    async def _ollama_completion(
        self,
        prompt: str,
        system_prompt: Optional[str],
        max_tokens: int,
        temperature: float
    ) -> Dict[str, Any]:
        """Call Ollama API"""
        # Build the full prompt
        full_prompt = prompt
        if system_prompt:
            full_prompt = f"{system_prompt}\n\n{prompt}"

        data = await self._post_json(
            self.config.ollama_base_url,
            "/api/generate",
            {
                "model": self.config.ollama_model,
                "prompt": full_prompt,
                "stream": False,
                "options": {
                    "temperature": temperature,
                    "num_predict": max_tokens
                }
            },
        )

        return {
            "content": data.get("response", ""),
            "tokens_used": data.get("eval_count", 0) + data.get("prompt_eval_count", 0),
            "model": self.config.ollama_model,
            "provider": "ollama",
        }

    async def _post_json(
        self,
        base_url: str,
        path: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            async with self._client(base_url) as client:
                response = await client.post(path, json=payload, headers=headers)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"{self.provider} request timed out after {self.config.llm_timeout_seconds}s")
            raise AIRequestError(f"LLM request timed out: {e}", provider=self.provider) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"{self.provider} API error: {status} {e.response.reason_phrase}")
            raise AIRequestError(
                f"{self.provider} API error: {status} {e.response.reason_phrase}",
                provider=self.provider,
                status_code=status,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{self.provider} API error: {e}")
            raise AIRequestError(f"LLM API failed: {e}", provider=self.provider) from e

    async def _openai_compatible_completion(
        self,
        prompt: str,
        system_prompt: Optional[str],
        max_tokens: int,
        temperature: float
    ) -> Dict[str, Any]:
        """Call OpenAI-compatible API (OpenAI, Groq, Together, etc.)"""
        from openai import AsyncOpenAI, OpenAIError

        client = AsyncOpenAI(
            api_key=self.config.openai_api_key,
            base_url=self.config.openai_api_base,
            timeout=self.config.llm_timeout_seconds,
        )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await client.chat.completions.create(
                model=self.config.openai_model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature
            )
        except OpenAIError as e:
            logger.error(f"LLM API error: {e}")
            raise AIRequestError(f"LLM API failed: {e}", provider=self.provider) from e

        return {
            "content": response.choices[0].message.content or "",
            "tokens_used": response.usage.total_tokens if response.usage else 0,
            "model": response.model,
            "provider": self.provider
        }


# Singleton instance
_llm_provider = None


def get_llm_provider() -> LLMProvider:
    """Get or create LLM provider singleton"""
    global _llm_provider
    if _llm_provider is None:
        _llm_provider = LLMProvider()
    return _llm_provider
