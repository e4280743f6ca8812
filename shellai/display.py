"""
Terminal rendering of agent notifications.

Module: shellai/display.py
"""

import json
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from .agent.models import ConfirmationRequest
from .agent.notifications import NotificationSink


class ConsoleSink(NotificationSink):
    """
    Notification sink that renders to a rich console.

    Text from the model or from tools is wrapped in ``Text`` so brackets in
    it are printed literally rather than parsed as markup.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        show_thinking: bool = True,
        show_progress: bool = True,
    ):
        self.console = console or Console()
        self.show_thinking = show_thinking
        self.show_progress = show_progress

    def on_thinking(self, text: str) -> None:
        if self.show_thinking:
            self.console.print(Text(text, style="dim"))

    def on_tool_call(self, tool_name: str, parameters: Dict[str, Any]) -> None:
        summary = _summarize(parameters)
        self.console.print(Text.assemble((f"⚙ {tool_name}", "cyan"), " ", (summary, "dim")))

    def on_confirmation(self, request: ConfirmationRequest) -> None:
        body = Text(request.content + "\n\n", style="bold")
        body.append(json.dumps(request.parameters, indent=2, ensure_ascii=False, default=str), style="white")
        self.console.print(
            Panel(body, title=Text(f"Confirmation required: {request.tool}", style="yellow"), border_style="yellow")
        )

    def on_progress(self, label: str, current: int, total: int) -> None:
        if self.show_progress:
            self.console.print(Text.assemble((f"[{current}/{total}]", "dim"), " ", label))

    def on_response(self, text: str) -> None:
        self.console.print(Panel(Markdown(text), border_style="green"))

    def on_error(self, text: str) -> None:
        self.console.print(Text.assemble(("Error:", "bold red"), " ", text))


def _summarize(parameters: Dict[str, Any], limit: int = 80) -> str:
    text = json.dumps(parameters, ensure_ascii=False, default=str)
    return text if len(text) <= limit else text[: limit - 3] + "..."
