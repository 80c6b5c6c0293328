"""Turn an extracted model payload into a GeneratedRule."""

import secrets
import string
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from siemgen.errors import ValidationError
from siemgen.models import NOT_SPECIFIED, GeneratedRule, GenerationRequest, RuleMetadata


BASE36_ALPHABET = string.digits + string.ascii_lowercase
RULE_ID_PREFIX = "rule-"


def to_base36(number: int) -> str:
    """Encode a non-negative integer in base 36."""
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_rule_id() -> str:
    """Generate a fallback rule ID: prefix, random token, time suffix."""
    token = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"{RULE_ID_PREFIX}{token}-{to_base36(int(time.time() * 1000))}"


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_response(payload: Any, request: GenerationRequest) -> GeneratedRule:
    """
    Validate a model payload and build the final rule.

    Severity and MITRE mapping come from the request, and the timestamp is
    taken now; whatever the model said about them is ignored.

    Raises:
        ValidationError: if sigmaRule or kqlQuery is missing or empty
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Invalid response format: missing required fields")

    sigma_rule = payload.get("sigmaRule")
    kql_query = payload.get("kqlQuery")
    if not _non_empty_string(sigma_rule) or not _non_empty_string(kql_query):
        raise ValidationError("Invalid response format: missing required fields")

    rule_id = payload.get("ruleId")
    if not _non_empty_string(rule_id):
        rule_id = generate_rule_id()

    return GeneratedRule(
        sigma_rule=sigma_rule,
        kql_query=kql_query,
        rule_id=rule_id,
        metadata=RuleMetadata(
            severity=request.severity,
            mitre_mapping=request.mitre_attack or NOT_SPECIFIED,
            generation_timestamp=utc_timestamp(),
        ),
    )
