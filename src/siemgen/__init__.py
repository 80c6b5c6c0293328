"""
siemgen - AI-assisted SIEM rule generation.

Turn a natural language detection use case into a Sigma rule and a
Microsoft Sentinel KQL query using Anthropic, OpenAI or Groq models.
"""

__version__ = "0.1.0"

from siemgen.core import RuleGenerator
from siemgen.config import Settings
from siemgen.errors import GenerationError
from siemgen.models import GenerationRequest, GeneratedRule, Provider, Severity

__all__ = [
    "RuleGenerator",
    "Settings",
    "GenerationError",
    "GenerationRequest",
    "GeneratedRule",
    "Provider",
    "Severity",
]
