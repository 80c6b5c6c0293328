"""Core RuleGenerator class - main entry point for the library."""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Optional, Union

from siemgen.config import Settings
from siemgen.errors import GenerationError, ProviderError
from siemgen.llm import PROVIDERS, LLMProvider
from siemgen.models import GeneratedRule, GenerationRequest, Provider
from siemgen.normalizer import normalize_response
from siemgen.prompts import build_prompt

logger = logging.getLogger("siemgen.core")


class RuleGenerator:
    """
    Generate a Sigma rule and a KQL query from a detection use case.

    Example:
        >>> generator = RuleGenerator()
        >>> rule = await generator.generate(GenerationRequest(
        ...     use_case="Detect lateral movement via PsExec",
        ...     severity="high",
        ...     provider="openai",
        ... ))
        >>> print(rule.kql_query)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        providers: Optional[Mapping[Provider, LLMProvider]] = None,
    ):
        """
        Initialize the generator.

        Args:
            settings: Fallback credentials and model defaults (default: from environment)
            providers: Adapter per provider, overriding the ones built from settings
        """
        self.settings = settings or Settings.from_env()

        if providers is None:
            providers = {
                name: provider_class.from_settings(self.settings)
                for name, provider_class in PROVIDERS.items()
            }
        self._providers: dict[Provider, LLMProvider] = dict(providers)

    def get_provider(self, provider: Union[Provider, str]) -> LLMProvider:
        """Get the adapter for a provider."""
        try:
            return self._providers[Provider(provider)]
        except (ValueError, KeyError):
            name = getattr(provider, "value", provider)
            raise ProviderError(f"Unsupported API provider: {name}")

    async def generate(self, request: GenerationRequest) -> GeneratedRule:
        """
        Generate rules for a request.

        Raises:
            GenerationError: whatever stage failed, with the cause message
        """
        start_time = time.time()

        try:
            prompt = build_prompt(request)
            adapter = self.get_provider(request.provider)
            logger.info("Generating rules with %s", adapter.get_model_name())

            payload = await adapter.send(prompt, api_key=request.api_key)
            rule = normalize_response(payload, request)
        except Exception as e:
            logger.warning("Rule generation failed (%s): %s", type(e).__name__, e)
            raise GenerationError(f"AI generation failed: {e}", cause_message=str(e)) from e

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info("Generated rule %s in %dms", rule.rule_id, elapsed_ms)
        return rule

    def generate_sync(self, request: GenerationRequest) -> GeneratedRule:
        """Synchronous wrapper for generate()."""
        return asyncio.run(self.generate(request))

    async def generate_batch(
        self,
        requests: list[GenerationRequest],
    ) -> list[Union[GeneratedRule, GenerationError]]:
        """
        Generate rules for several requests concurrently.

        Returns:
            One GeneratedRule or GenerationError per request, in order
        """
        tasks = [self.generate(request) for request in requests]
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def test_connection(self, provider: Union[Provider, str], api_key: Optional[str] = None) -> bool:
        """Probe a provider with a tiny prompt. Never raises."""
        try:
            adapter = self.get_provider(provider)
            return await adapter.ping(api_key)
        except Exception as e:
            logger.info("Connection test for %s failed (%s)", provider, type(e).__name__)
            return False

    @property
    def supported_providers(self) -> list[Provider]:
        """Providers with an adapter."""
        return list(self._providers.keys())
