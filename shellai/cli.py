"""
shell-ai Main CLI Application.

Module: shellai/cli.py
"""

import asyncio
import logging
import sys
from typing import Optional

import click
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax

from . import __version__
from .agent.orchestrator import OrchestratorState
from .bootstrap import build_orchestrator
from .config import (
    DEFAULT_CONFIG_DIR,
    Config,
    apply_env_overrides,
    get_config_path,
    get_memory_path,
    load_config,
    save_config,
    set_config_value,
)
from .display import ConsoleSink
from .interactive import InteractiveMode, render_tools_table, run_with_confirmations
from .tools import create_default_registry

load_dotenv(override=False)

console = Console()

EXIT_CODES = {
    OrchestratorState.DONE: 0,
    OrchestratorState.ABORTED: 1,
    OrchestratorState.CANCELLED: 2,
}


def _effective_config(ctx: click.Context) -> Config:
    config = apply_env_overrides(ctx.obj["config"])
    model = config.model.model_copy()
    if ctx.obj.get("provider"):
        model.provider = ctx.obj["provider"]
    if ctx.obj.get("model"):
        model.current_model = ctx.obj["model"]
    return config.model_copy(update={"model": model})


def _make_sink(config: Config) -> ConsoleSink:
    return ConsoleSink(
        console,
        show_thinking=config.display.show_thinking,
        show_progress=config.display.show_progress,
    )


@click.group(invoke_without_command=True)
@click.option("--config-dir", default=DEFAULT_CONFIG_DIR, help="Configuration directory")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--provider",
    type=click.Choice(["ollama", "openai", "mock"], case_sensitive=False),
    default=None,
    help="Model provider (overrides config)",
)
@click.option("--model", default=None, help="Model name (overrides config)")
@click.option("-y", "--yes", "auto_approve", is_flag=True, help="Approve every tool confirmation")
@click.pass_context
def cli(
    ctx: click.Context,
    config_dir: str,
    version: bool,
    verbose: bool,
    provider: Optional[str],
    model: Optional[str],
    auto_approve: bool,
) -> None:
    """
    shell-ai - delegate multi-step tasks to a language model with tools.

    Run without a command to start the interactive assistant.
    """
    if version:
        console.print(f"[bold green]shell-ai v{__version__}[/bold green]")
        ctx.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["config"] = load_config(config_dir)
    ctx.obj["provider"] = provider.lower() if provider else None
    ctx.obj["model"] = model
    ctx.obj["auto_approve"] = auto_approve

    if ctx.invoked_subcommand is None:
        config = _effective_config(ctx)
        orchestrator = build_orchestrator(
            config, sink=_make_sink(config), memory_path=get_memory_path(ctx.obj["config_dir"])
        )
        InteractiveMode(config, orchestrator, auto_approve=auto_approve).run()


@cli.command("run")
@click.argument("request", nargs=-1, required=True)
@click.pass_context
def run_cmd(ctx: click.Context, request: tuple) -> None:
    """Execute one REQUEST non-interactively."""
    config = _effective_config(ctx)
    user_input = " ".join(request)

    async def _run() -> OrchestratorState:
        orchestrator = build_orchestrator(
            config, sink=_make_sink(config), memory_path=get_memory_path(ctx.obj["config_dir"])
        )
        try:
            result = await run_with_confirmations(
                orchestrator, user_input, auto_approve=ctx.obj["auto_approve"]
            )
        finally:
            await orchestrator.model_service.adapter.aclose()
        return result.state

    state = asyncio.run(_run())
    ctx.exit(EXIT_CODES.get(state, 1))


@cli.command("tools")
@click.pass_context
def tools_cmd(ctx: click.Context) -> None:
    """List enabled tools."""
    config = ctx.obj["config"]
    registry = create_default_registry(config.enabled_tools, config.working_directory)
    console.print(render_tools_table(registry))


@cli.group("config")
def config_cmd() -> None:
    """Manage the configuration file."""


@config_cmd.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration."""
    config: Config = ctx.obj["config"]
    text = yaml.dump(config.model_dump(exclude_none=True), default_flow_style=False)
    console.print(f"[dim]{get_config_path(ctx.obj['config_dir'])}[/dim]")
    console.print(Syntax(text, "yaml"))


@config_cmd.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY (dotted, e.g. agent.max_iterations) to VALUE."""
    try:
        config = set_config_value(ctx.obj["config"], key, value)
    except KeyError:
        raise click.ClickException(f"Unknown configuration key: {key}")
    except ValueError as e:
        raise click.ClickException(f"Invalid value for {key}: {e}")

    save_config(config, ctx.obj["config_dir"])
    console.print(f"[green]✓[/green] {escape(key)} = {escape(str(value))}")


@config_cmd.command("reset")
@click.option("--force", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def config_reset(ctx: click.Context, force: bool) -> None:
    """Restore the default configuration."""
    if not force and not click.confirm("Reset configuration to defaults?"):
        console.print("[yellow]Cancelled[/yellow]")
        return
    save_config(Config(), ctx.obj["config_dir"])
    console.print("[green]✓[/green] Configuration reset to defaults")


def main() -> None:
    """Main entry point for shell-ai."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
