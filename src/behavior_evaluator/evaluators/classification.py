"""Tool-call classification helpers.

Stateless helpers that sort tool calls into behavioral categories and
extract the facts rules reason about (targets, failures, shell commands).
"""

from __future__ import annotations

import re
import shlex

from behavior_evaluator.models.enums import EventType, ToolCategory
from behavior_evaluator.models.timeline_event import TimelineEvent

__all__ = [
    "EXECUTION_TOOLS",
    "READ_TOOLS",
    "FILE_MODIFYING_TOOLS",
    "SHELL_TOOLS",
    "classify_tool",
    "is_execution_event",
    "is_read_event",
    "is_failed_tool_call",
    "tool_target",
    "modified_files",
    "shell_command",
    "command_heads",
    "is_destructive_command",
]

EXECUTION_TOOLS = frozenset({"bash", "write", "edit", "patch", "multiedit", "task"})
READ_TOOLS = frozenset({"read", "glob", "grep", "list"})
FILE_MODIFYING_TOOLS = frozenset({"write", "edit", "patch", "multiedit"})
SHELL_TOOLS = frozenset({"bash"})

_SEGMENT_SPLIT = re.compile(r"&&|\|\||;|\n")
_ENV_ASSIGNMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")

_DESTRUCTIVE_PATTERNS = (
    re.compile(r"(^|\s)(sudo\s+)?rm(\s|$)"),
    re.compile(r"(^|\s)(sudo\s+)?rmdir(\s|$)"),
    re.compile(r"(^|\s)unlink(\s|$)"),
    re.compile(r"(^|\s)shred(\s|$)"),
    re.compile(r"git\s+clean\b"),
    re.compile(r"git\s+reset\s+--hard\b"),
    re.compile(r"git\s+checkout\s+--\s"),
    re.compile(r"git\s+branch\s+-D\b"),
)


def _normalize(tool: str | None) -> str:
    return (tool or "").strip().lower()


def classify_tool(tool: str | None) -> ToolCategory:
    """Classify a tool name as execution, read or other."""
    name = _normalize(tool)
    if name in EXECUTION_TOOLS:
        return ToolCategory.execution
    if name in READ_TOOLS:
        return ToolCategory.read
    return ToolCategory.other


def is_execution_event(event: TimelineEvent) -> bool:
    """Whether the event is a state-changing tool call."""
    return (
        event.type == EventType.tool_call
        and classify_tool(event.tool) == ToolCategory.execution
    )


def is_read_event(event: TimelineEvent) -> bool:
    """Whether the event is a non-mutating tool call."""
    return (
        event.type == EventType.tool_call
        and classify_tool(event.tool) == ToolCategory.read
    )


def is_failed_tool_call(event: TimelineEvent) -> bool:
    """Whether a tool call reported failure.

    A call fails when its status is 'error', when it carries error text,
    or when a shell call recorded a non-zero exit code.
    """
    if event.type != EventType.tool_call:
        return False
    if event.data.get("status") == "error" or event.data.get("error"):
        return True
    metadata = event.data.get("metadata")
    if isinstance(metadata, dict):
        exit_code = metadata.get("exit", metadata.get("exitCode"))
        if isinstance(exit_code, int) and not isinstance(exit_code, bool):
            return exit_code != 0
    return False


def tool_target(event: TimelineEvent) -> str | None:
    """Return what a tool call acts on: a file path, pattern or command."""
    tool_input = event.tool_input
    for key in ("filePath", "file_path", "path", "command", "pattern", "url"):
        value = tool_input.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def modified_files(event: TimelineEvent) -> list[str]:
    """Files changed by a file-modifying tool call or a patch event."""
    if event.type == EventType.patch:
        files = event.data.get("files")
        return [f for f in files if isinstance(f, str)] if isinstance(files, list) else []
    if event.type == EventType.tool_call and _normalize(event.tool) in FILE_MODIFYING_TOOLS:
        target = tool_target(event)
        return [target] if target else []
    return []


def shell_command(event: TimelineEvent) -> str | None:
    """Command line of a shell tool call."""
    if event.type != EventType.tool_call or _normalize(event.tool) not in SHELL_TOOLS:
        return None
    command = event.tool_input.get("command")
    return command.strip() if isinstance(command, str) and command.strip() else None


def command_heads(command: str) -> list[str]:
    """Leading program name of each chained command segment.

    ``cd src && cat a.py | head`` yields ``['cd', 'cat']``; programs that
    only appear after a pipe are not leading.
    """
    heads: list[str] = []
    for segment in _SEGMENT_SPLIT.split(command):
        pipeline_start = segment.split("|", 1)[0].strip()
        if not pipeline_start:
            continue
        try:
            tokens = shlex.split(pipeline_start)
        except ValueError:
            tokens = pipeline_start.split()
        while tokens and (tokens[0] == "sudo" or _ENV_ASSIGNMENT.match(tokens[0])):
            tokens = tokens[1:]
        if tokens:
            heads.append(tokens[0].rsplit("/", 1)[-1])
    return heads


def is_destructive_command(command: str) -> bool:
    """Whether a shell command deletes files or discards work."""
    return any(pattern.search(command) for pattern in _DESTRUCTIVE_PATTERNS)
