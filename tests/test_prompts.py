"""Tests for prompt construction."""

from siemgen.models import GenerationRequest, Severity
from siemgen.prompts import REQUIREMENTS, build_prompt


class TestBuildPrompt:
    """Test the generation prompt."""

    def test_minimal_request(self):
        """Required fields only."""
        request = GenerationRequest(use_case="Detect PowerShell downloads", severity=Severity.LOW)

        prompt = build_prompt(request)

        assert "Use Case: Detect PowerShell downloads" in prompt
        assert "Severity: low" in prompt
        assert "Log Source" not in prompt
        assert "Event IDs" not in prompt
        assert "MITRE ATT&CK:" not in prompt
        assert "None" not in prompt
        assert "\n\n\n" not in prompt

    def test_optional_fields_included(self):
        """Optional fields appear when present."""
        request = GenerationRequest(
            use_case="Detect brute force logons",
            log_source="Windows Security",
            event_ids="4625",
            severity=Severity.HIGH,
            mitre_attack="T1110",
        )

        prompt = build_prompt(request)

        assert "Log Source: Windows Security" in prompt
        assert "Event IDs: 4625" in prompt
        assert "MITRE ATT&CK: T1110" in prompt

    def test_details_are_contiguous(self):
        """Detail lines sit together in a fixed order."""
        request = GenerationRequest(
            use_case="Detect brute force logons",
            event_ids="4625",
            severity=Severity.MEDIUM,
            mitre_attack="T1110",
        )

        prompt = build_prompt(request)

        assert (
            "Use Case: Detect brute force logons\n"
            "Event IDs: 4625\n"
            "Severity: medium\n"
            "MITRE ATT&CK: T1110"
        ) in prompt

    def test_blank_optional_fields_are_omitted(self):
        """Blank strings are treated as absent."""
        request = GenerationRequest(
            use_case="Detect brute force logons",
            log_source="   ",
            severity=Severity.MEDIUM,
        )

        assert "Log Source" not in build_prompt(request)

    def test_requirements_are_numbered_in_order(self):
        """Requirements keep a deterministic order."""
        prompt = build_prompt(GenerationRequest(use_case="x", severity="low"))

        positions = [prompt.index(f"{i}. {text}") for i, text in enumerate(REQUIREMENTS, start=1)]
        assert positions == sorted(positions)

    def test_schema_names_required_keys(self):
        """The schema block names the keys the normalizer reads."""
        prompt = build_prompt(GenerationRequest(use_case="x", severity="low"))

        assert '"sigmaRule"' in prompt
        assert '"kqlQuery"' in prompt
        assert '"ruleId"' in prompt
        assert prompt.index('"sigmaRule"') < prompt.index('"kqlQuery"')

    def test_prompt_is_deterministic(self):
        """Same request, same prompt."""
        request = GenerationRequest(use_case="Detect PsExec", severity="critical", mitre_attack="T1021.002")
        assert build_prompt(request) == build_prompt(request)
