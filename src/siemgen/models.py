"""Data models for siemgen."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


NOT_SPECIFIED = "Not specified"


class Severity(str, Enum):
    """Detection rule severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Provider(str, Enum):
    """LLM backends a request can name."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    AZURE = "azure"
    GROQ = "groq"


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class GenerationRequest(CamelModel):
    """Input for a single rule generation."""

    model_config = ConfigDict(frozen=True)

    use_case: str = Field(..., min_length=1, description="Natural language detection use case")
    log_source: Optional[str] = Field(None, description="Log source, e.g. 'Windows Security'")
    event_ids: Optional[str] = Field(None, description="Comma separated event IDs")
    severity: Severity = Field(..., description="Severity the caller wants on the rule")
    mitre_attack: Optional[str] = Field(None, description="MITRE ATT&CK technique, e.g. 'T1021.002'")
    provider: Provider = Field(
        Provider.ANTHROPIC,
        validation_alias=AliasChoices("provider", "apiProvider"),
        description="LLM backend to use",
    )
    api_key: Optional[str] = Field(None, repr=False, description="Caller supplied API key")

    @field_validator("use_case")
    @classmethod
    def _use_case_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Use case description must not be blank")
        return value

    @field_validator("log_source", "event_ids", "mitre_attack", "api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RuleMetadata(CamelModel):
    """Metadata stamped onto every generated rule."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    mitre_mapping: str = NOT_SPECIFIED
    generation_timestamp: str


class GeneratedRule(CamelModel):
    """A Sigma rule and KQL query produced for one request."""

    model_config = ConfigDict(frozen=True)

    sigma_rule: str
    kql_query: str
    rule_id: str
    metadata: RuleMetadata


class RuleGenerationCreate(CamelModel):
    """Record handed to storage after a successful generation."""

    use_case: str
    log_source: Optional[str] = None
    event_ids: Optional[str] = None
    severity: Severity
    mitre_attack: Optional[str] = None
    sigma_rule: str
    kql_query: str
    rule_id: str

    @classmethod
    def from_result(cls, request: GenerationRequest, rule: GeneratedRule) -> "RuleGenerationCreate":
        return cls(
            use_case=request.use_case,
            log_source=request.log_source,
            event_ids=request.event_ids,
            severity=request.severity,
            mitre_attack=request.mitre_attack,
            sigma_rule=rule.sigma_rule,
            kql_query=rule.kql_query,
            rule_id=rule.rule_id,
        )


class RuleGeneration(RuleGenerationCreate):
    """A stored generation."""

    id: int
    created_at: datetime


class ApiConfigRequest(CamelModel):
    """Body of a connection test."""

    provider: Provider
    api_key: str = Field(..., min_length=1, repr=False)
