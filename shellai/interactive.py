"""
Interactive Mode for shell-ai.

Module: shellai/interactive.py

REPL with slash commands. Anything else is handed to the task orchestrator
together with the running conversation history.
"""

import asyncio
import logging
import signal
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, List, Optional

from prompt_toolkit import HTML, PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .agent.models import ChatMessage
from .agent.orchestrator import RunResult, TaskOrchestrator
from .config import Config
from .tools import SENSITIVE_TOOLS, ToolRegistry

logger = logging.getLogger(__name__)

console = Console()

ApprovalPrompt = Callable[[], Awaitable[bool]]


@contextmanager
def cancel_on_sigint(orchestrator: TaskOrchestrator) -> Iterator[None]:
    """Route Ctrl-C to ``orchestrator.cancel`` for the duration of the block."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
    except (NotImplementedError, RuntimeError):
        # Not available on this platform/loop; Ctrl-C falls back to KeyboardInterrupt.
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def run_with_confirmations(
    orchestrator: TaskOrchestrator,
    user_input: str,
    history: Optional[List[ChatMessage]] = None,
    auto_approve: bool = False,
    ask_approval: Optional[ApprovalPrompt] = None,
) -> RunResult:
    """
    Run one request, answering confirmation prompts until the task ends.

    Ctrl-C while the task runs cancels it. The Ctrl-C handler is removed
    while the user is being asked, so Ctrl-C at the prompt declines.
    """
    ask_approval = ask_approval or ask_approval_prompt

    with cancel_on_sigint(orchestrator):
        result = await orchestrator.process_user_input(user_input, history)

    while result.awaiting_confirmation:
        approved = auto_approve or await ask_approval()
        with cancel_on_sigint(orchestrator):
            result = await orchestrator.resume(approved)
    return result


async def ask_approval_prompt() -> bool:
    """Ask ``Approve? [y/N]``; Ctrl-C or Ctrl-D count as no."""
    session: PromptSession = PromptSession()
    try:
        answer = await session.prompt_async(HTML("<ansiyellow>Approve? [y/N]:</ansiyellow> "))
    except (KeyboardInterrupt, EOFError):
        return False
    return answer.strip().lower() in ("y", "yes")


class InteractiveMode:
    """Interactive mode handler for shell-ai."""

    def __init__(
        self,
        config: Config,
        orchestrator: TaskOrchestrator,
        auto_approve: bool = False,
    ):
        """
        Initialize interactive mode.

        Args:
            config: Loaded configuration
            orchestrator: Orchestrator that executes requests
            auto_approve: Approve every confirmation without asking
        """
        self.config = config
        self.orchestrator = orchestrator
        self.auto_approve = auto_approve
        self.history: List[ChatMessage] = []
        self.session = PromptSession(history=InMemoryHistory())
        self.running = True

        self.commands = {
            "/help": self.show_help,
            "/tools": self.cmd_tools,
            "/clear": self.cmd_clear,
            "/model": self.cmd_model,
            "/exit": self.cmd_exit,
            "/quit": self.cmd_exit,
        }
        self.completer = WordCompleter(list(self.commands.keys()), ignore_case=True, sentence=True)

    def run(self) -> None:
        """Run interactive mode."""
        asyncio.run(self.run_async())

    async def run_async(self) -> None:
        self.show_welcome()

        try:
            while self.running:
                try:
                    user_input = (await self.session.prompt_async("> ", completer=self.completer)).strip()
                except KeyboardInterrupt:
                    console.print("[yellow]Use /exit to leave interactive mode[/yellow]")
                    continue
                except EOFError:
                    break

                if not user_input:
                    continue

                if user_input.startswith("/"):
                    self._handle_command(user_input)
                else:
                    await self._handle_request(user_input)
        finally:
            await self.orchestrator.model_service.adapter.aclose()

    def _handle_command(self, user_input: str) -> None:
        parts = user_input.split(maxsplit=1)
        command = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        handler = self.commands.get(command)
        if handler is None:
            console.print(
                f"[yellow]Unknown command:[/yellow] {escape(command)}. "
                f"Type [bold]/help[/bold] for available commands."
            )
            return
        try:
            handler(args)
        except Exception as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")

    async def _handle_request(self, user_input: str) -> None:
        console.print()
        result = await run_with_confirmations(
            self.orchestrator, user_input, self.history, auto_approve=self.auto_approve
        )

        self.history.append(ChatMessage(role="user", content=user_input))
        if result.response:
            self.history.append(ChatMessage(role="assistant", content=result.response))
        elif result.error:
            self.history.append(ChatMessage(role="assistant", content=f"Error: {result.error}"))

    def show_welcome(self) -> None:
        adapter = self.orchestrator.model_service.adapter
        console.print(
            Panel(
                f"[bold green]shell-ai v{__version__}[/bold green]\n"
                f"[dim]Model: {adapter.provider}/{adapter.model}. "
                f"Type a request, or /help for commands.[/dim]",
                border_style="green",
            )
        )

    def show_help(self, args: str = "") -> None:
        table = Table(title="Commands", show_header=False, box=None)
        table.add_row("[bold]/help[/bold]", "Show this help")
        table.add_row("[bold]/tools[/bold]", "List available tools")
        table.add_row("[bold]/clear[/bold]", "Clear conversation history")
        table.add_row("[bold]/model \\[name][/bold]", "Show or switch the model")
        table.add_row("[bold]/exit[/bold]", "Leave interactive mode")
        console.print(table)

    def cmd_tools(self, args: str = "") -> None:
        console.print(render_tools_table(self.orchestrator.tools))

    def cmd_clear(self, args: str = "") -> None:
        self.history.clear()
        self.orchestrator.reset()
        console.print("[green]Conversation history cleared[/green]")

    def cmd_model(self, args: str = "") -> None:
        name = args.strip()
        if not name:
            console.print(f"Current model: [bold]{escape(self.orchestrator.model_service.model)}[/bold]")
            return
        self.orchestrator.model_service.set_model(name)
        console.print(f"[green]Switched model to {escape(name)}[/green]")

    def cmd_exit(self, args: str = "") -> None:
        console.print("[dim]Goodbye![/dim]")
        self.running = False


def render_tools_table(registry: ToolRegistry) -> Table:
    """Table of registered tools and whether they need approval."""
    table = Table(title="Available Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Description")
    table.add_column("Confirmation")
    for tool in registry.list():
        needs = "[yellow]required[/yellow]" if tool.name in SENSITIVE_TOOLS else "[green]no[/green]"
        if tool.name == "shell-exec":
            needs = "[yellow]unless read-only[/yellow]"
        table.add_row(tool.name, tool.description, needs)
    return table
