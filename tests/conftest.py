"""Shared fakes for provider SDK clients."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from siemgen.models import GenerationRequest


def text_block(text: str):
    return SimpleNamespace(type="text", text=text)


def tool_use_block():
    return SimpleNamespace(type="tool_use", id="toolu_01", name="lookup", input={})


def anthropic_message(*blocks):
    return SimpleNamespace(content=list(blocks))


def chat_completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeClientFactory:
    """Stands in for an SDK client constructor; records every client built."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.clients = []

    def __call__(self, api_key: str):
        client = MagicMock()
        client.api_key = api_key
        client.messages.create = AsyncMock(return_value=self.response, side_effect=self.error)
        client.chat.completions.create = AsyncMock(return_value=self.response, side_effect=self.error)
        client.close = AsyncMock()
        self.clients.append(client)
        return client

    @property
    def fallback(self):
        return self.clients[0]


RULE_PAYLOAD = {
    "sigmaRule": "title: PsExec detection\nlogsource:\n    product: windows\n",
    "kqlQuery": "DeviceProcessEvents | where FileName =~ \"psexec.exe\"",
    "ruleId": "r-123",
}


@pytest.fixture
def rule_payload():
    return dict(RULE_PAYLOAD)


@pytest.fixture
def rule_json():
    return json.dumps(RULE_PAYLOAD)


@pytest.fixture
def psexec_request():
    return GenerationRequest(
        use_case="Detect lateral movement via PsExec",
        severity="high",
        provider="openai",
    )
