"""Command-line interface for siemgen."""

import asyncio
import json
import logging
import re
import sys
from pathlib import Path
from typing import Optional

import click
import pydantic
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from siemgen import __version__
from siemgen.core import RuleGenerator
from siemgen.errors import GenerationError
from siemgen.models import GeneratedRule, GenerationRequest, Provider, Severity


console = Console()

PROVIDER_CHOICES = [p.value for p in Provider]
SEVERITY_CHOICES = [s.value for s in Severity]


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    # Suppress verbose libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def safe_filename(rule_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]", "_", rule_id) or "rule"


def save_rule(rule: GeneratedRule, directory: Path) -> tuple[Path, Path]:
    """Write the Sigma rule and KQL query next to each other."""
    directory.mkdir(parents=True, exist_ok=True)
    stem = safe_filename(rule.rule_id)
    sigma_path = directory / f"{stem}.yml"
    kql_path = directory / f"{stem}.kql"
    sigma_path.write_text(rule.sigma_rule)
    kql_path.write_text(rule.kql_query)
    return sigma_path, kql_path


def print_result(rule: GeneratedRule, output_format: str = "pretty"):
    """Print a generated rule."""
    if output_format == "json":
        console.print_json(json.dumps(rule.model_dump(mode="json", by_alias=True), indent=2))
        return

    if output_format == "raw":
        click.echo(rule.sigma_rule)
        click.echo()
        click.echo(rule.kql_query)
        return

    meta = rule.metadata
    console.print()
    console.print(f"[bold green]Generated rule {rule.rule_id}[/bold green]")
    console.print(
        f"[dim]Severity: {meta.severity.value} | MITRE: {meta.mitre_mapping} | "
        f"Generated: {meta.generation_timestamp}[/dim]"
    )
    console.print()
    console.print(Panel(
        Syntax(rule.sigma_rule, "yaml", theme="monokai", line_numbers=True),
        title="Sigma Rule",
        border_style="blue",
    ))
    console.print(Panel(
        Syntax(rule.kql_query, "kusto", theme="monokai", line_numbers=True),
        title="KQL Query (Microsoft Sentinel)",
        border_style="cyan",
    ))


def print_error(message: str):
    console.print(Panel(
        f"[red]Generation failed:[/red] {message}",
        title="Error",
        border_style="red",
    ))


@click.group()
@click.version_option(version=__version__, prog_name="siemgen")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool):
    """siemgen - Sigma rules and Sentinel KQL queries from detection use cases."""
    configure_logging(verbose)


@main.command()
@click.argument("use_case")
@click.option("-s", "--severity", default="medium",
              type=click.Choice(SEVERITY_CHOICES),
              help="Rule severity (default: medium)")
@click.option("-p", "--provider", default="anthropic",
              type=click.Choice(PROVIDER_CHOICES),
              help="LLM provider (default: anthropic)")
@click.option("-l", "--log-source", default=None, help="Log source, e.g. 'Windows Security'")
@click.option("-e", "--event-ids", default=None, help="Event IDs, e.g. '4624,4625'")
@click.option("-t", "--mitre", default=None, help="MITRE ATT&CK technique, e.g. T1021.002")
@click.option("-k", "--api-key", default=None, help="API key for this call (default: environment)")
@click.option("-o", "--output", "output_format", default="pretty",
              type=click.Choice(["pretty", "json", "raw"]),
              help="Output format (default: pretty)")
@click.option("--save", type=click.Path(file_okay=False), help="Directory to save the rule files to")
def generate(
    use_case: str,
    severity: str,
    provider: str,
    log_source: Optional[str],
    event_ids: Optional[str],
    mitre: Optional[str],
    api_key: Optional[str],
    output_format: str,
    save: Optional[str],
):
    """Generate a Sigma rule and KQL query for a use case.

    Examples:

        siemgen generate "Detect lateral movement via PsExec" -s high

        siemgen generate "Brute force logons" -e 4625 -l "Windows Security" -p groq
    """
    try:
        request = GenerationRequest(
            use_case=use_case,
            severity=severity,
            provider=provider,
            log_source=log_source,
            event_ids=event_ids,
            mitre_attack=mitre,
            api_key=api_key,
        )
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid request: {e.errors()[0]['msg']}[/red]")
        sys.exit(1)

    generator = RuleGenerator()

    try:
        with console.status("[bold blue]Generating detection rules..."):
            rule = generator.generate_sync(request)
    except GenerationError as e:
        print_error(str(e))
        sys.exit(1)

    print_result(rule, output_format)

    if save:
        sigma_path, kql_path = save_rule(rule, Path(save))
        console.print(f"\n[green]Saved:[/green] {sigma_path}, {kql_path}")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-s", "--severity", default="medium", type=click.Choice(SEVERITY_CHOICES))
@click.option("-p", "--provider", default="anthropic", type=click.Choice(PROVIDER_CHOICES))
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), help="Output directory for rules")
def batch(input_file: str, severity: str, provider: str, output_dir: Optional[str]):
    """Generate rules for a file of use cases (one per line)."""
    use_cases = [
        line.strip() for line in Path(input_file).read_text().splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]

    if not use_cases:
        console.print("[yellow]No use cases found in input file[/yellow]")
        return

    console.print(f"[blue]Processing {len(use_cases)} use cases...[/blue]")

    requests = [
        GenerationRequest(use_case=use_case, severity=severity, provider=provider)
        for use_case in use_cases
    ]
    generator = RuleGenerator()
    results = asyncio.run(generator.generate_batch(requests))

    success_count = 0
    for i, (use_case, result) in enumerate(zip(use_cases, results)):
        console.print(f"\n[bold]Use case {i+1}/{len(use_cases)}[/bold]: {use_case[:50]}")

        if isinstance(result, GeneratedRule):
            success_count += 1
            console.print(f"  [green]OK[/green] - {result.rule_id}")
            if output_dir:
                save_rule(result, Path(output_dir))
        else:
            console.print(f"  [red]FAILED[/red] - {result}")

    console.print(f"\n[bold]Complete:[/bold] {success_count}/{len(use_cases)} rules generated")

    if success_count < len(use_cases):
        sys.exit(1)


@main.command("test-connection")
@click.option("-p", "--provider", required=True, type=click.Choice(PROVIDER_CHOICES))
@click.option("-k", "--api-key", default=None, help="API key to test (default: environment)")
def test_connection(provider: str, api_key: Optional[str]):
    """Check that a provider accepts an API key."""
    generator = RuleGenerator()

    with console.status(f"[bold blue]Testing {provider}..."):
        ok = asyncio.run(generator.test_connection(provider, api_key))

    if ok:
        console.print(f"[green]API connection successful[/green] ({provider})")
    else:
        console.print(f"[red]API connection failed[/red] ({provider})")
        sys.exit(1)


@main.command()
def providers():
    """List LLM providers and their models."""
    generator = RuleGenerator()
    supported = set(generator.supported_providers)

    table = Table(title="LLM Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Model")
    table.add_column("Fallback key")

    for provider in Provider:
        status = "Available" if provider in supported else "[yellow]Not implemented[/yellow]"
        model = generator.settings.model_for(provider) or "-"
        has_key = "set" if generator.settings.api_key_for(provider) else "[dim]missing[/dim]"
        table.add_row(provider.value, status, model, has_key)

    console.print(table)


@main.command()
@click.option("-h", "--host", default="127.0.0.1", help="Host to bind to")
@click.option("-p", "--port", default=8000, type=int, help="Port to listen on")
def serve(host: str, port: int):
    """Start the HTTP API server."""
    import uvicorn

    console.print("[bold green]Starting siemgen API[/bold green]")
    console.print(f"[blue]http://{host}:{port}[/blue]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run("siemgen.web.app:app", host=host, port=port)


if __name__ == "__main__":
    main()
