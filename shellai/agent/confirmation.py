"""
Confirmation policy for tool invocations.

Module: shellai/agent/confirmation.py

Decides whether a proposed tool call may run straight away or has to wait
for a human to approve it. Pure and synchronous.

A shell command skips approval only when it starts with an allow-listed
command. Any command containing a shell control operator (pipe, redirect,
``;``, ``&``, ``&&``, ``||``, backticks, ``$(``, newline) needs approval even when it
starts with an allow-listed command, so ``ls | head`` is gated while ``ls -la``
is not. This is stricter than plain prefix matching.
"""

from typing import Any, Dict, FrozenSet, Iterable, Optional

SHELL_TOOL = "shell-exec"

DEFAULT_SENSITIVE_TOOLS: FrozenSet[str] = frozenset({"file-write", "file-edit", SHELL_TOOL})

# Read-only / introspection commands that may run without approval.
# Multi-word entries match as a prefix of the whole command.
DEFAULT_SAFE_COMMANDS = (
    "ls",
    "dir",
    "pwd",
    "whoami",
    "ps",
    "top",
    "df",
    "free",
    "cat",
    "head",
    "tail",
    "less",
    "more",
    "grep",
    "find",
    "echo",
    "which",
    "git status",
    "git log",
    "git diff",
    "git branch",
    "npm list",
    "npm test",
    "npm run build",
    "node -v",
    "tsc --noEmit",
    "pip list",
    "pip show",
    "python --version",
)

# Anything that chains, redirects or substitutes can hide a second command.
SHELL_CONTROL_TOKENS = (";", "&", "|", ">", "<", "`", "$(", "\n", "\r")


class ConfirmationPolicy:
    """Classifies tool calls as auto-executable or approval-required."""

    def __init__(
        self,
        sensitive_tools: Optional[Iterable[str]] = None,
        safe_commands: Optional[Iterable[str]] = None,
    ):
        self.sensitive_tools = frozenset(sensitive_tools if sensitive_tools is not None else DEFAULT_SENSITIVE_TOOLS)
        safe = safe_commands if safe_commands is not None else DEFAULT_SAFE_COMMANDS
        self.safe_commands = tuple(cmd.strip().lower() for cmd in safe if cmd.strip())

    def requires_confirmation(self, tool_name: str, parameters: Optional[Dict[str, Any]] = None) -> bool:
        """
        Check whether a tool call needs human approval.

        Args:
            tool_name: Name of the tool to invoke
            parameters: Parameters the tool would be called with

        Returns:
            True if the call must be approved first
        """
        if tool_name not in self.sensitive_tools:
            return False

        if tool_name != SHELL_TOOL:
            return True

        command = (parameters or {}).get("command")
        if not isinstance(command, str):
            return True
        return not self.is_safe_command(command)

    def is_safe_command(self, command: str) -> bool:
        """Check a shell command against the read-only allow-list."""
        if any(token in command for token in SHELL_CONTROL_TOKENS):
            return False
        normalized = " ".join(command.strip().lower().split())
        if not normalized:
            return False

        first_token = normalized.split(" ", 1)[0]
        for safe in self.safe_commands:
            if " " in safe:
                if normalized == safe or normalized.startswith(safe + " "):
                    return True
            elif first_token == safe:
                return True
        return False


_default_policy = ConfirmationPolicy()


def requires_confirmation(tool_name: str, parameters: Optional[Dict[str, Any]] = None) -> bool:
    """Check a tool call against the default policy."""
    return _default_policy.requires_confirmation(tool_name, parameters)
