"""Interactive chat: the conversation state and its full-screen terminal front end."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.data_structures import Point
from prompt_toolkit.filters import Condition
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.processors import BeforeInput, ConditionalProcessor
from prompt_toolkit.output import Output
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import TextArea

from .agent import Agent
from .client import ApiError

WELCOME = "Welcome to the chat room!\nType a message and press Enter to send."
PLACEHOLDER = "Send a message..."
PROMPT = "┃ "
CHAR_LIMIT = 280
INPUT_HEIGHT = 3

_STYLE = Style.from_dict(
    {
        "you": "fg:ansimagenta",
        "claude": "fg:ansibrightyellow",
        "placeholder": "fg:ansibrightblack",
    }
)


class Speaker(str, Enum):
    """Who wrote a line of the transcript."""

    USER = "You"
    CLAUDE = "Claude"


@dataclass(frozen=True)
class ChatEntry:
    """One rendered message of the transcript."""

    speaker: Speaker
    text: str

    def render(self) -> str:
        return f"{self.speaker.value}: {self.text}"


def _user_message(text: str) -> dict[str, Any]:
    return {"role": "user", "content": [{"type": "text", "text": text}]}


class ChatSession:
    """Holds the conversation with the agent and the transcript shown to the user."""

    def __init__(self, agent: Agent, on_change: Callable[[], None] | None = None) -> None:
        self.agent = agent
        self.on_change = on_change
        self.conversation: list[dict[str, Any]] = []
        self.messages: list[ChatEntry] = []
        self.current_streaming_message = ""
        self.is_streaming = False
        self._lock = threading.RLock()
        self._run_lock = threading.Lock()

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def submit(self, user_input: str) -> None:
        """Show the user's message, then talk to the agent until it stops calling tools."""
        with self._lock:
            self.messages.append(ChatEntry(Speaker.USER, user_input))
            self.is_streaming = True
        self._changed()
        with self._run_lock:
            try:
                self._converse(user_input)
            finally:
                self.on_stream_complete()

    def _converse(self, user_input: str) -> None:
        if user_input:
            self.conversation.append(_user_message(user_input))

        while True:
            try:
                message = self.agent.run_inference_with_streaming(
                    list(self.conversation), self.on_stream_text
                )
            except (ApiError, ValueError) as exc:
                self.on_stream_text(f"Error: {exc}")
                return

            self.conversation.append(message.to_param())

            results = []
            for block in message.content:
                if block.get("type") != "tool_use":
                    continue
                name = block.get("name", "")
                self.on_stream_text(f"\n🔧 Using tool: {name}\n")
                results.append(
                    self.agent.execute_tool(block.get("id", ""), name, block.get("input") or {})
                )

            if not results:
                return
            self.conversation.append({"role": "user", "content": results})

    def on_stream_text(self, text: str) -> None:
        """Add streamed text to the reply being shown."""
        with self._lock:
            self.current_streaming_message += text
            entry = ChatEntry(Speaker.CLAUDE, self.current_streaming_message)
            if self.messages and self.messages[-1].speaker is Speaker.CLAUDE:
                self.messages[-1] = entry
            else:
                self.messages.append(entry)
        self._changed()

    def on_stream_complete(self) -> None:
        """Mark the current reply as finished."""
        with self._lock:
            self.is_streaming = False
            self.current_streaming_message = ""
        self._changed()

    def transcript(self) -> str:
        """Return the rendered messages, one after another."""
        with self._lock:
            return "\n".join(entry.render() for entry in self.messages)

    def snapshot(self) -> list[ChatEntry]:
        """Return a copy of the rendered messages."""
        with self._lock:
            return list(self.messages)


class ChatApp:
    """Full-screen terminal chat: a scrolling transcript above a short input box."""

    def __init__(
        self,
        session: ChatSession,
        *,
        input: Input | None = None,
        output: Output | None = None,
    ) -> None:
        self.session = session
        session.on_change = self._refresh

        self._input = TextArea(
            height=INPUT_HEIGHT,
            prompt=PROMPT,
            multiline=False,
            wrap_lines=True,
            accept_handler=self._accept,
            input_processors=[
                ConditionalProcessor(
                    BeforeInput(PLACEHOLDER, style="class:placeholder"),
                    filter=Condition(lambda: not self._input.text),
                )
            ],
        )
        self._input.buffer.on_text_changed += self._limit

        self._control = FormattedTextControl(
            self._fragments, focusable=False, get_cursor_position=self._bottom
        )
        body = HSplit(
            [
                Window(self._control, wrap_lines=True),
                Window(height=1),
                self._input,
            ]
        )

        bindings = KeyBindings()

        @bindings.add("c-c")
        @bindings.add("escape", eager=True)
        def _quit(event: Any) -> None:
            event.app.exit(result=self._input.text)

        self._app: Application[str] = Application(
            layout=Layout(body, focused_element=self._input),
            key_bindings=bindings,
            style=_STYLE,
            full_screen=True,
            mouse_support=True,
            input=input,
            output=output,
        )

    def _fragments(self) -> list[tuple[str, str]]:
        entries = self.session.snapshot()
        if not entries:
            return [("", WELCOME)]
        fragments: list[tuple[str, str]] = []
        for position, entry in enumerate(entries):
            if position:
                fragments.append(("", "\n"))
            style = "class:you" if entry.speaker is Speaker.USER else "class:claude"
            fragments.append((style, f"{entry.speaker.value}: " if entry.speaker is Speaker.USER else entry.speaker.value))
            if entry.speaker is Speaker.CLAUDE:
                fragments.append(("", ": "))
            fragments.append(("", entry.text))
        return fragments

    def _bottom(self) -> Point:
        lines = sum(text.count("\n") for _, text in self._fragments())
        return Point(x=0, y=lines)

    def _limit(self, buffer: Buffer) -> None:
        if len(buffer.text) > CHAR_LIMIT:
            buffer.text = buffer.text[:CHAR_LIMIT]

    def _accept(self, buffer: Buffer) -> bool:
        worker = threading.Thread(target=self.session.submit, args=(buffer.text,), daemon=True)
        worker.start()
        return False

    def _refresh(self) -> None:
        self._app.invalidate()

    def run(self) -> str:
        """Run until the user quits; print and return whatever was left in the input box."""
        text = self._app.run() or ""
        print(text)
        return text