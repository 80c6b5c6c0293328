"""LLM provider adapters.

Each adapter sends one prompt to one backend and returns the raw model
output. A caller supplied key gets its own client for the duration of the
call; otherwise the adapter's shared client, built once from the process
settings, is used.
"""

import json
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

import anthropic
import openai

from siemgen.config import GROQ_BASE_URL, PLACEHOLDER_API_KEY, Settings
from siemgen.errors import ExtractionError, ProviderError
from siemgen.extraction import extract_json
from siemgen.models import Provider
from siemgen.prompts import (
    CONNECTION_TEST_PROMPT,
    CONNECTION_TEST_REPLY,
    JSON_ONLY_SUFFIX,
    STRICT_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
)

logger = logging.getLogger("siemgen.llm")

RawModelOutput = Any
ClientFactory = Callable[[str], Any]

PREVIEW_CHARS = 200
CONNECTION_TEST_MAX_TOKENS = 50


def preview(text: Optional[str]) -> str:
    """Truncated view of model output for logs."""
    text = text or ""
    return text[:PREVIEW_CHARS] + ("..." if len(text) > PREVIEW_CHARS else "")


class LLMProvider(ABC):
    """Abstract base class for provider adapters."""

    provider: Provider = NotImplemented
    DEFAULT_MODEL: str = "unknown"
    api_errors: tuple[type[Exception], ...] = ()

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 2048,
        timeout: float = 120.0,
        client_factory: Optional[ClientFactory] = None,
    ):
        """
        Initialize the adapter.

        Args:
            api_key: Fallback key used when a call brings none
            model: Model name override
            max_tokens: Maximum tokens to generate
            timeout: Per-request timeout in seconds
            client_factory: Builds an SDK client for a key (defaults to make_client)
        """
        self.model = model or self.DEFAULT_MODEL
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client_factory = client_factory or self.make_client
        self._client = self._client_factory(api_key or PLACEHOLDER_API_KEY)

    @classmethod
    def from_settings(cls, settings: Settings, client_factory: Optional[ClientFactory] = None) -> "LLMProvider":
        return cls(
            api_key=settings.api_key_for(cls.provider),
            model=settings.model_for(cls.provider),
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            client_factory=client_factory,
        )

    @abstractmethod
    def make_client(self, api_key: str) -> Any:
        """Build an SDK client bound to one key."""
        pass

    @abstractmethod
    async def _send(self, client: Any, prompt: str) -> RawModelOutput:
        pass

    @abstractmethod
    async def _ping(self, client: Any) -> str:
        """Run the connection test prompt and return the reply text."""
        pass

    @asynccontextmanager
    async def client_for(self, api_key: Optional[str] = None) -> AsyncIterator[Any]:
        """Yield an ephemeral client for api_key, or the shared fallback client."""
        if not api_key:
            yield self._client
            return

        client = self._client_factory(api_key)
        try:
            yield client
        finally:
            await client.close()

    async def send(self, prompt: str, api_key: Optional[str] = None) -> RawModelOutput:
        """
        Send a generation prompt.

        Raises:
            ProviderError: if the backend rejects or fails the call
            ExtractionError: if the reply is not JSON
        """
        async with self.client_for(api_key) as client:
            try:
                return await self._send(client, prompt)
            except self.api_errors as e:
                raise ProviderError(str(e)) from e

    async def ping(self, api_key: Optional[str] = None) -> bool:
        """Minimal round trip; true if the model echoes the test phrase."""
        async with self.client_for(api_key) as client:
            text = await self._ping(client)
        return CONNECTION_TEST_REPLY in (text or "").lower()

    def get_model_name(self) -> str:
        return f"{self.provider.value}/{self.model}"


class AnthropicProvider(LLMProvider):
    """Anthropic Claude adapter; parses the first text block as JSON."""

    provider = Provider.ANTHROPIC
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    api_errors = (anthropic.APIError,)

    def make_client(self, api_key: str) -> anthropic.AsyncAnthropic:
        return anthropic.AsyncAnthropic(api_key=api_key, timeout=self.timeout, max_retries=0)

    async def _send(self, client: Any, prompt: str) -> RawModelOutput:
        message = await client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )

        content = message.content[0] if message.content else None
        if content is None or content.type != "text":
            raise ProviderError("Unexpected response format from Anthropic")

        logger.debug("Anthropic raw response: %s", preview(content.text))
        try:
            return json.loads(content.text)
        except (ValueError, RecursionError) as e:
            raise ExtractionError("Anthropic returned invalid JSON format") from e

    async def _ping(self, client: Any) -> str:
        message = await client.messages.create(
            model=self.model,
            max_tokens=CONNECTION_TEST_MAX_TOKENS,
            messages=[{"role": "user", "content": CONNECTION_TEST_PROMPT}],
        )
        content = message.content[0] if message.content else None
        if content is None or content.type != "text":
            return ""
        return content.text


class OpenAIProvider(LLMProvider):
    """OpenAI adapter using JSON mode."""

    provider = Provider.OPENAI
    DEFAULT_MODEL = "gpt-4o"
    api_errors = (openai.APIError,)

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        self.base_url = base_url
        super().__init__(*args, **kwargs)

    def make_client(self, api_key: str) -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    async def _send(self, client: Any, prompt: str) -> RawModelOutput:
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_tokens=self.max_tokens,
        )

        content = response.choices[0].message.content or "{}"
        logger.debug("OpenAI raw response: %s", preview(content))
        try:
            return json.loads(content)
        except (ValueError, RecursionError) as e:
            raise ExtractionError("OpenAI returned invalid JSON format") from e

    async def _ping(self, client: Any) -> str:
        response = await client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": CONNECTION_TEST_PROMPT}],
            max_tokens=CONNECTION_TEST_MAX_TOKENS,
        )
        return response.choices[0].message.content or ""


class GroqProvider(OpenAIProvider):
    """Groq adapter; OpenAI-compatible API without a reliable JSON mode."""

    provider = Provider.GROQ
    DEFAULT_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"

    def __init__(self, *args, base_url: Optional[str] = None, **kwargs):
        super().__init__(*args, base_url=base_url or GROQ_BASE_URL, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings, client_factory: Optional[ClientFactory] = None) -> "GroqProvider":
        return cls(
            api_key=settings.groq_api_key,
            model=settings.groq_model,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            client_factory=client_factory,
            base_url=settings.groq_base_url,
        )

    async def _send(self, client: Any, prompt: str) -> RawModelOutput:
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": STRICT_SYSTEM_PROMPT},
                {"role": "user", "content": prompt + JSON_ONLY_SUFFIX},
            ],
            max_tokens=self.max_tokens,
            temperature=0.1,
        )

        content = response.choices[0].message.content or "{}"
        logger.debug("Groq raw response: %s", preview(content))

        try:
            return extract_json(content)
        except ExtractionError as e:
            logger.error("Failed to parse Groq response: %s", preview(content))
            raise ExtractionError(
                "Groq returned invalid JSON format. The response was not in the expected format."
            ) from e


PROVIDERS: dict[Provider, type[LLMProvider]] = {
    Provider.ANTHROPIC: AnthropicProvider,
    Provider.OPENAI: OpenAIProvider,
    Provider.GROQ: GroqProvider,
}


def get_provider(
    provider: str,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> LLMProvider:
    """
    Build the adapter for a provider name.

    Raises:
        ProviderError: for names with no adapter (including azure)
    """
    try:
        provider_class = PROVIDERS[Provider(provider)]
    except (ValueError, KeyError):
        name = getattr(provider, "value", provider)
        raise ProviderError(f"Unsupported API provider: {name}")

    return provider_class.from_settings(settings or Settings(), client_factory=client_factory)
