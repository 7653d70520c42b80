"""The conversational agent: streamed inference and tool execution."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .tooling import Payload, ToolDefinition

MODEL = "claude-3-haiku-20240307"
MAX_TOKENS = 4096

SYSTEM_PROMPT = """Your Core Instructions:
- Always read entire files before making changes to avoid duplication, missed code, or misunderstandings.
- Commit changes early and often, especially after logical milestones in large tasks, to avoid losing progress.
- Do not "skip" libraries or substitute without permission. If a library is not working, you are likely using it incorrectly\u2014especially if the user requested it.
- Organize code into separate files when appropriate. Follow best practices for naming, modularity, complexity, commenting, and readability.
- Prioritize code readability: Code is read more often than it's written.
- Implement real solutions\u2014not dummies or placeholders\u2014unless explicitly told to.
- Only refactor large sections of code when explicitly instructed.
-For each new task:
\t- Understand current architecture.
\t- Identify files to modify.
\t- Draft and present a detailed Plan, covering architecture, possible edge cases, and best approaches. Get user approval before coding.
- You are an experienced, multi-language developer skilled in architecture, design, UI/UX, and copywriting.
- For UI/UX tasks, ensure designs are clear, attractive, user-friendly, and follow best practices, focusing on smooth and engaging interactions.
- For large or vague tasks, break them into smaller subtasks. If unclear, ask the user to clarify or help decompose the problem.
"""

StreamingCallback = Callable[[str], None]


class MessageStream(Protocol):
    def stream_messages(self, request: dict[str, Any]) -> Iterable[dict[str, Any]]: ...


def tool_result_block(tool_id: str, content: str, is_error: bool) -> dict[str, Any]:
    """Build the content block that reports a tool's result back to the model."""
    return {
        "type": "tool_result",
        "tool_use_id": tool_id,
        "content": [{"type": "text", "text": content}],
        "is_error": is_error,
    }


def _block_param(block: dict[str, Any]) -> dict[str, Any]:
    kind = block.get("type")
    if kind == "text":
        param: dict[str, Any] = {"type": "text", "text": block.get("text", "")}
        if block.get("citations"):
            param["citations"] = copy.deepcopy(block["citations"])
        return param
    if kind == "tool_use":
        return {
            "type": "tool_use",
            "id": block.get("id", ""),
            "name": block.get("name", ""),
            "input": copy.deepcopy(block.get("input") or {}),
        }
    if kind == "thinking":
        return {
            "type": "thinking",
            "thinking": block.get("thinking", ""),
            "signature": block.get("signature", ""),
        }
    if kind == "redacted_thinking":
        return {"type": "redacted_thinking", "data": block.get("data", "")}
    return copy.deepcopy(block)


@dataclass
class Message:
    """An assistant message assembled from streamed events."""

    id: str = ""
    type: str = "message"
    role: str = "assistant"
    model: str = ""
    content: list[dict[str, Any]] = field(default_factory=list)
    stop_reason: str | None = None
    stop_sequence: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)
    _partial_json: dict[int, str] = field(default_factory=dict, repr=False, compare=False)

    def _block(self, index: Any) -> dict[str, Any]:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.content):
            raise ValueError("received event for content block out of range")
        return self.content[index]

    def accumulate(self, event: dict[str, Any]) -> None:
        """Fold one stream event into the message."""
        kind = event.get("type")
        if kind == "message_start":
            start = event.get("message") or {}
            self.id = start.get("id", "")
            self.type = start.get("type", "message")
            self.role = start.get("role", "assistant")
            self.model = start.get("model", "")
            self.content = copy.deepcopy(start.get("content") or [])
            self.stop_reason = start.get("stop_reason")
            self.stop_sequence = start.get("stop_sequence")
            self.usage = dict(start.get("usage") or {})
            self._partial_json.clear()
        elif kind == "content_block_start":
            self.content.append(copy.deepcopy(event.get("content_block") or {}))
        elif kind == "content_block_delta":
            index = event.get("index")
            block = self._block(index)
            self._apply_delta(index, block, event.get("delta") or {})
        elif kind == "content_block_stop":
            index = event.get("index")
            block = self._block(index)
            raw = self._partial_json.pop(index, "")
            if raw:
                try:
                    block["input"] = json.loads(raw)
                except ValueError as exc:
                    raise ValueError(f"invalid tool input JSON: {exc}") from exc
        elif kind == "message_delta":
            delta = event.get("delta") or {}
            if "stop_reason" in delta:
                self.stop_reason = delta["stop_reason"]
            if "stop_sequence" in delta:
                self.stop_sequence = delta["stop_sequence"]
            usage = event.get("usage") or {}
            self.usage.update({key: value for key, value in usage.items() if value is not None})

    def _apply_delta(self, index: int, block: dict[str, Any], delta: dict[str, Any]) -> None:
        kind = delta.get("type")
        if kind == "text_delta":
            block["text"] = block.get("text", "") + delta.get("text", "")
        elif kind == "input_json_delta":
            self._partial_json[index] = self._partial_json.get(index, "") + delta.get(
                "partial_json", ""
            )
        elif kind == "citations_delta":
            block["citations"] = [*(block.get("citations") or []), delta.get("citation")]
        elif kind == "thinking_delta":
            block["thinking"] = block.get("thinking", "") + delta.get("thinking", "")
        elif kind == "signature_delta":
            block["signature"] = block.get("signature", "") + delta.get("signature", "")

    def to_param(self) -> dict[str, Any]:
        """Turn the message into a conversation entry for the next request."""
        return {"role": self.role, "content": [_block_param(block) for block in self.content]}


class Agent:
    """A conversational agent that can call tools."""

    def __init__(self, client: MessageStream, tools: Iterable[ToolDefinition]) -> None:
        self.client = client
        self.tools = list(tools)

    def execute_tool(self, tool_id: str, name: str, tool_input: Payload) -> dict[str, Any]:
        """Run the named tool and wrap its outcome in a tool result block."""
        tool = next((tool for tool in self.tools if tool.name == name), None)
        if tool is None:
            return tool_result_block(tool_id, "tool not found", True)
        try:
            response = tool.run(tool_input)
        except Exception as exc:  # any failure is reported back to the model
            return tool_result_block(tool_id, str(exc), True)
        return tool_result_block(tool_id, response, False)

    def run_inference_with_streaming(
        self,
        conversation: Sequence[dict[str, Any]],
        on_streaming_text: StreamingCallback | None = None,
    ) -> Message:
        """Send the conversation, pass streamed text to the callback, return the reply."""
        request: dict[str, Any] = {
            "model": MODEL,
            "max_tokens": MAX_TOKENS,
            "system": [{"type": "text", "text": SYSTEM_PROMPT}],
            "messages": list(conversation),
        }
        if self.tools:
            request["tools"] = [tool.to_api() for tool in self.tools]

        message = Message()
        for event in self.client.stream_messages(request):
            message.accumulate(event)
            if on_streaming_text is not None and event.get("type") == "content_block_delta":
                delta = event.get("delta") or {}
                if delta.get("type") == "text_delta":
                    on_streaming_text(delta.get("text", ""))
        return message