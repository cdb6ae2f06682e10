"""Orchestration CLI commands.

Provides commands for listing models, calling models, running multi-model
strategies and executing chain graphs.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.table import Table

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.defaults import default_catalog
from modelweave.catalog.loader import register_catalog_file
from modelweave.catalog.models import ModelFilter
from modelweave.config import load_config_from_env
from modelweave.errors import OrchestrationError
from modelweave.orchestrator import Orchestrator
from modelweave.strategies.models import Strategy

console = Console()


async def build_orchestrator() -> Orchestrator:
    """Build an orchestrator from environment configuration."""
    return await Orchestrator.from_config(load_config_from_env())


def build_catalog() -> ProviderCatalog:
    """Build the provider catalog (built-ins plus MODELWEAVE_CATALOG_PATH)."""
    config = load_config_from_env()
    catalog = default_catalog()
    if config.catalog_path:
        register_catalog_file(catalog, config.catalog_path)
    return catalog


def load_graph_file(path: Path) -> dict[str, Any]:
    """Load a chain graph description from a JSON or YAML file.

    Raises:
        click.ClickException: If the file cannot be parsed into a mapping
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise click.ClickException(f"{path} does not contain a graph object")
    return data


@click.command(name="models")
@click.option("--capability", "capabilities", multiple=True, help="Required capability tag")
@click.option("--max-cost-tier", type=int, help="Maximum cost tier")
@click.option("--provider", "providers", multiple=True, help="Restrict to provider ids")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format (table or json)",
)
def list_models(
    capabilities: tuple[str, ...],
    max_cost_tier: Optional[int],
    providers: tuple[str, ...],
    output_format: str,
) -> None:
    """List catalog models.

    Examples:
        modelweave models
        modelweave models --capability coding --max-cost-tier 1
    """
    catalog = build_catalog()
    model_filter = ModelFilter(
        capabilities=list(capabilities),
        max_cost_tier=max_cost_tier,
        provider_ids=list(providers) or None,
    )
    models = catalog.list_models(model_filter)

    if output_format == "json":
        output = [model.model_dump(mode="json") for model in models]
        click.echo(json.dumps(output, indent=2))
        return

    table = Table(title="Models")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Provider", style="green")
    table.add_column("Tier", justify="right")
    table.add_column("Context", justify="right")
    table.add_column("Capabilities", style="dim")

    for model in models:
        table.add_row(
            model.id,
            model.provider_id,
            str(model.cost_tier),
            str(model.context_window),
            ", ".join(model.capabilities),
        )

    console.print(table)
    if not models:
        console.print("[yellow]No models match.[/yellow]")


@click.command(name="call")
@click.argument("model_id", type=str)
@click.argument("prompt", type=str)
@click.option("--system", "system_prompt", type=str, help="System prompt")
@click.option("--max-tokens", type=int, help="Completion token budget")
@click.option("--temperature", type=float, help="Sampling temperature")
def call_model(
    model_id: str,
    prompt: str,
    system_prompt: Optional[str],
    max_tokens: Optional[int],
    temperature: Optional[float],
) -> None:
    """Call one model.

    Examples:
        modelweave call gpt-4o-mini "Summarize the plot of Hamlet"
    """
    params: dict[str, Any] = {"system_prompt": system_prompt, "max_tokens": max_tokens}
    if temperature is not None:
        params["temperature"] = temperature

    async def _call() -> None:
        orchestrator = await build_orchestrator()
        try:
            result = await orchestrator.call(prompt, model_id, **params)
        finally:
            await orchestrator.close()

        if result.error is not None:
            raise click.ClickException(str(result.error))
        assert result.response is not None
        click.echo(result.response.content)
        console.print(
            f"[dim]{result.response.provider_id}/{result.response.model_id} "
            f"{result.response.usage.total_tokens} tokens, "
            f"${result.response.cost:.6f}, {result.response.latency_ms:.0f}ms[/dim]"
        )

    asyncio.run(_call())


@click.command(name="multi")
@click.argument("model_ids", nargs=-1, required=True)
@click.option("--prompt", "-p", required=True, help="Prompt sent to every model")
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in Strategy], case_sensitive=False),
    default=Strategy.PARALLEL.value,
    help="Multi-call strategy",
)
@click.option("--threshold", type=int, help="Consensus threshold")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def call_many(
    model_ids: tuple[str, ...],
    prompt: str,
    strategy: str,
    threshold: Optional[int],
    as_json: bool,
) -> None:
    """Run a multi-model strategy.

    Examples:
        modelweave multi gpt-4o claude-haiku-4-5 -p "Is P=NP?" -s consensus
    """

    async def _multi() -> None:
        orchestrator = await build_orchestrator()
        try:
            result = await orchestrator.call_many(prompt, list(model_ids), strategy, threshold)
        except OrchestrationError as e:
            raise click.ClickException(str(e)) from e
        finally:
            await orchestrator.close()

        if as_json:
            click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
            return

        if result.consensus is not None:
            click.echo(result.consensus.content)
        elif result.best is not None:
            click.echo(result.best.content)

        for failure in result.failures:
            console.print(f"[red]{failure.model_id}: {failure.error_code} {failure.message}[/red]")
        console.print(
            f"[dim]{len(result.responses)}/{result.attempted} responses, "
            f"${result.total_cost:.6f}, {result.total_time_ms:.0f}ms[/dim]"
        )
        if not result.success:
            raise click.ClickException(f"Strategy '{result.strategy.value}' did not succeed")

    asyncio.run(_multi())


@click.command(name="run-chain")
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def run_chain(graph_file: Path, as_json: bool) -> None:
    """Execute a chain graph from a JSON or YAML file.

    Examples:
        modelweave run-chain summarize.yaml
    """
    graph = load_graph_file(graph_file)

    async def _run() -> None:
        orchestrator = await build_orchestrator()
        try:
            result = await orchestrator.execute_chain(graph)
        finally:
            await orchestrator.close()

        if as_json:
            click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        if not result.success:
            raise click.ClickException(result.error or "Chain execution failed")
        if not as_json:
            click.echo(result.output)
            if result.generated_code:
                console.print(result.generated_code)
            console.print(
                f"[dim]{result.nodes_executed} nodes, "
                f"${result.total_cost:.6f}, {result.total_time_ms:.0f}ms[/dim]"
            )

    asyncio.run(_run())


@click.command(name="serve")
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("modelweave.api.app:app", host=host, port=port, reload=reload)
