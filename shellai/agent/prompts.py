"""
Prompt builders for planning, reflection, recovery and synthesis.

Module: shellai/agent/prompts.py
"""

import json
from typing import Any, Iterable, List

from ..tools.base import BaseTool
from .models import Step, Task
from .result_formatter import format_tool_results


def render_tool_catalogue(tools: Iterable[BaseTool]) -> str:
    """One ``- name: description`` line per tool, followed by its parameters."""
    lines = []
    for tool in tools:
        lines.append(f"- {tool.name}: {tool.description}")
        lines.extend(f"    {name}: {help_text}" for name, help_text in tool.parameters.items())
    return "\n".join(lines) if lines else "- (no tools available)"


def _dump(value: Any, max_chars: int) -> str:
    text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    if len(text) > max_chars:
        text = text[:max_chars] + "\n... [truncated]"
    return text


def build_planning_prompt(user_input: str, tools: Iterable[BaseTool]) -> str:
    return f"""You are an autonomous AI agent planning how to accomplish a user's request. Break the request down into a series of logical steps that can be executed with the available tools.

USER REQUEST: "{user_input}"

AVAILABLE TOOLS:
{render_tool_catalogue(tools)}

PLANNING PRINCIPLES:
1. Think step by step and split complex work into smaller parts
2. Use tools to gather information before making decisions
3. Plan for iteration: results can be analyzed and followed up on
4. Consider failure modes and alternative approaches
5. Be thorough but efficient

RESPONSE FORMAT (JSON):
{{
  "task_description": "Clear description of what needs to be accomplished",
  "strategy": "High-level approach",
  "steps": [
    {{
      "action": "tool_call|analysis|reflection",
      "description": "What this step accomplishes",
      "tool": "tool-name (only when action is tool_call)",
      "parameters": {{"param": "value"}},
      "reasoning": "Why this step is needed"
    }}
  ],
  "expected_outcome": "What success looks like"
}}

Respond with the JSON plan only."""


def build_reflection_prompt(
    task: Task,
    completed_step: Step,
    tools: Iterable[BaseTool],
    max_result_chars: int = 4000,
) -> str:
    result_data = completed_step.result.data if completed_step.result else None
    return f"""You are an autonomous AI agent reflecting on the result of an action. Decide whether more actions are needed to fully accomplish the user's request.

ORIGINAL REQUEST: "{task.user_request}"
TASK DESCRIPTION: "{task.description}"
COMPLETED STEP: "{completed_step.description}"
STEP RESULT:
{_dump(result_data, max_result_chars)}

AVAILABLE TOOLS:
{render_tool_catalogue(tools)}

REFLECTION QUESTIONS:
1. Does this result fully answer the user's request?
2. Are there follow-up actions that would clearly help?
3. Does the data need further analysis or processing?

RESPONSE FORMAT (JSON):
{{
  "analysis": "Your analysis of the current results",
  "is_task_complete": false,
  "next_actions": [
    {{
      "action": "tool_call|analysis",
      "description": "What this action will accomplish",
      "tool": "tool-name (if needed)",
      "parameters": {{"param": "value"}},
      "reasoning": "Why this action is valuable"
    }}
  ],
  "completion_assessment": "How close the task is to being fully satisfied"
}}

Set "is_task_complete" to true and leave "next_actions" empty when nothing more is needed."""


def build_recovery_prompt(
    task: Task,
    failed_step: Step,
    error: str,
    error_category: str,
    tools: Iterable[BaseTool],
) -> str:
    attempted = ""
    if failed_step.tool:
        attempted = f"\nATTEMPTED TOOL: {failed_step.tool} with parameters {json.dumps(failed_step.parameters or {}, default=str)}"
    return f"""An action failed during task execution. Suggest alternative approaches to recover and continue.

FAILED STEP: "{failed_step.description}"{attempted}
ERROR: "{error}"
ERROR CATEGORY: {error_category}
ORIGINAL REQUEST: "{task.user_request}"

AVAILABLE TOOLS:
{render_tool_catalogue(tools)}

Suggest 1-2 alternative steps that accomplish the same goal or work around the problem. Return an empty list if there is no sensible alternative.

RESPONSE FORMAT (JSON):
{{
  "recovery_strategy": "Brief description of the approach",
  "alternative_steps": [
    {{
      "action": "tool_call",
      "description": "What this recovery step will do",
      "tool": "tool-name",
      "parameters": {{"param": "value"}},
      "reasoning": "Why this might work better"
    }}
  ]
}}"""


def build_synthesis_prompt(task: Task, max_result_chars: int = 4000) -> str:
    completed: List[Step] = task.completed_steps()
    actions = "\n".join(
        f"- {step.description}{' ✅' if step.result else ''}" for step in completed
    ) or "- (no actions completed)"
    tool_results = format_tool_results(
        ((step.description, step.tool, step.result) for step in completed if step.result is not None),
        max_chars=max_result_chars,
    ) or "(no tool results)"

    return f"""Generate a response to the user based on the completed task execution.

ORIGINAL REQUEST: "{task.user_request}"
TASK DESCRIPTION: "{task.description}"

COMPLETED ACTIONS:
{actions}

TOOL RESULTS:
{tool_results}

Provide a helpful response that:
1. Summarizes what was accomplished
2. Presents the key findings and information
3. Explains context and significance where useful
4. Suggests relevant next steps or follow-up actions
5. Is conversational and user-friendly

Response:"""
