"""Prompt construction for rule generation."""

from siemgen.models import GenerationRequest


SYSTEM_PROMPT = (
    "You are a cybersecurity expert specializing in SIEM rule creation. "
    "Always respond with valid JSON containing both Sigma rules and KQL queries."
)

STRICT_SYSTEM_PROMPT = (
    "You are a cybersecurity expert specializing in SIEM rule creation. "
    "You MUST respond with ONLY valid JSON containing both Sigma rules and KQL queries. "
    "Do not include any text before or after the JSON object."
)

JSON_ONLY_SUFFIX = "\n\nIMPORTANT: Respond with ONLY valid JSON, no additional text or explanations."

CONNECTION_TEST_PROMPT = "Respond with 'connection successful' if you can read this message."
CONNECTION_TEST_REPLY = "connection successful"

PREAMBLE = (
    "You are an expert cybersecurity analyst specializing in SIEM rule creation. "
    "Generate both a Sigma rule and a KQL query for Microsoft Sentinel based on the "
    "following requirements:"
)

REQUIREMENTS = [
    "Generate a complete, syntactically correct Sigma rule following the official Sigma specification",
    "Generate a corresponding KQL query optimized for Microsoft Sentinel",
    "Include proper MITRE ATT&CK mappings if provided",
    "Set appropriate severity levels and false positive considerations",
    "Include detection logic that is specific and actionable",
    "Add relevant tags and references",
]

RESPONSE_SCHEMA = """Respond in JSON format with the following structure:
{
  "sigmaRule": "complete sigma rule in YAML format",
  "kqlQuery": "complete KQL query with comments",
  "ruleId": "generated UUID for the rule",
  "title": "descriptive title for the detection rule",
  "description": "brief description of what the rule detects"
}"""

CLOSING = "Ensure both rules are production-ready and follow security best practices."


def build_prompt(request: GenerationRequest) -> str:
    """Build the generation prompt for a request."""
    details = [f"Use Case: {request.use_case}"]

    if request.log_source:
        details.append(f"Log Source: {request.log_source}")
    if request.event_ids:
        details.append(f"Event IDs: {request.event_ids}")

    details.append(f"Severity: {request.severity.value}")

    if request.mitre_attack:
        details.append(f"MITRE ATT&CK: {request.mitre_attack}")

    requirements = [f"{i}. {text}" for i, text in enumerate(REQUIREMENTS, start=1)]

    sections = [
        PREAMBLE,
        "\n".join(details),
        "Requirements:\n" + "\n".join(requirements),
        RESPONSE_SCHEMA,
        CLOSING,
    ]
    return "\n\n".join(sections)
