# The agentic chat loop: send, dispatch tool calls, feed results back, stop.
# Author: AI Dock contributors
# Date: 2025-07-06
# Version: 0.3.0

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from aidock.core.tool_executor import ToolExecutor
from aidock.core.tool_registry import ToolRegistry
from aidock.models.common import Conversation, ImagePart, Message, ToolCall, Usage
from aidock.services.llm_connector import ChatTransport, TransportError, TransportOptions
from aidock.services.transcript import ChatObserver, TranscriptRecorder
from aidock.utils.logger import console

DEFAULT_MAX_ROUND_TRIPS = 10
CANCELLED_TOOL_RESULT = "Error: Tool call was cancelled by the user before it ran."


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    CONTINUING = "continuing"


class ExchangeOutcome(str, Enum):
    DONE = "done"
    CANCELLED = "cancelled"
    ERROR = "error"
    ROUND_TRIP_LIMIT = "round_trip_limit"


class ExchangeInProgressError(RuntimeError):
    """Raised when the conversation is touched while an exchange is running."""


class CancellationToken:
    """Cooperative cancellation: set once, polled by the loop at its suspension points."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ExchangeResult:
    outcome: ExchangeOutcome
    round_trips: int
    content: Optional[str] = None
    error: Optional[str] = None


@dataclass
class LoopOptions:
    max_round_trips: int = DEFAULT_MAX_ROUND_TRIPS
    tool_notice_delay: float = 0.1


class ChatOrchestrator:
    """
    Owns one conversation and runs exchanges against it, one at a time.

    An exchange starts with a user turn and alternates requests and tool
    dispatch until the model answers without tool calls, an error comes back,
    the user cancels, or max_round_trips requests have been made.
    """

    def __init__(self, transport: ChatTransport, registry: ToolRegistry,
                 transport_options: Callable[[], TransportOptions],
                 observer: Optional[ChatObserver] = None,
                 options: Optional[LoopOptions] = None,
                 executor: Optional[ToolExecutor] = None):
        if options is not None and options.max_round_trips < 1:
            raise ValueError("max_round_trips must be at least 1.")
        self.transport = transport
        self.registry = registry
        self.executor = executor or ToolExecutor(registry)
        self.transport_options = transport_options
        self.observer: ChatObserver = observer or TranscriptRecorder()
        self.options = options or LoopOptions()

        self.conversation = Conversation()
        self.usage: Optional[Usage] = None
        self.state = ExchangeState.IDLE
        self.last_outcome: Optional[ExchangeOutcome] = None
        self._token: Optional[CancellationToken] = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    def cancel(self) -> bool:
        """Requests cancellation of the running exchange. A no-op (False) when idle."""
        if self._token is None:
            return False
        if not self._token.cancelled:
            console.info("Cancellation requested.")
        self._token.cancel()
        return True

    def clear(self) -> None:
        """Forgets the whole conversation and the last usage figures."""
        if self.busy:
            raise ExchangeInProgressError("Cannot clear the conversation while a request is running.")
        self.conversation.clear()
        self.usage = None
        self.last_outcome = None
        self.observer.on_usage(Usage())
        console.info("Conversation cleared.")

    async def submit(self, text: Optional[str] = None, image: Optional[ImagePart] = None) -> ExchangeResult:
        """Appends a user turn and runs the exchange to one of its terminal outcomes."""
        if self.busy:
            raise ExchangeInProgressError("A request is already running for this conversation.")
        user_message = Message.user(text, image)

        token = CancellationToken()
        self._token = token
        self.observer.on_busy(True)
        try:
            self.conversation.append(user_message)
            self.observer.on_transcript("User", user_message.text or "[image]")
            result = await self._run(token)
        except Exception as e:
            console.exception("Unexpected error while processing the chat loop.")
            console.display_error_panel("Chat loop failed", f"{type(e).__name__}: {e}")
            self.observer.on_status(f"Exception: {e}")
            result = ExchangeResult(ExchangeOutcome.ERROR, round_trips=0, error=str(e))
        finally:
            self._token = None
            self.state = ExchangeState.IDLE
            self.observer.on_busy(False)

        self.last_outcome = result.outcome
        return result

    async def _run(self, token: CancellationToken) -> ExchangeResult:
        max_round_trips = self.options.max_round_trips
        for round_trip in range(1, max_round_trips + 1):
            if token.cancelled:
                return self._cancelled(round_trip - 1)

            self.state = ExchangeState.SENDING
            console.rule(f"Round trip {round_trip}")
            try:
                envelope = await self.transport.send(self.conversation, self.registry.list(), self.transport_options())
            except TransportError as e:
                self.observer.on_status(f"Exception: {e}")
                return ExchangeResult(ExchangeOutcome.ERROR, round_trip, error=str(e))

            if token.cancelled:
                return self._cancelled(round_trip)

            if envelope.error is not None:
                self.observer.on_status(f"API Error: {envelope.error.message}")
                return ExchangeResult(ExchangeOutcome.ERROR, round_trip, error=envelope.error.message)

            if envelope.usage is not None:
                self.usage = envelope.usage
                self.observer.on_usage(envelope.usage)

            if not envelope.choices:
                self.observer.on_status("API Error: response contained no choices")
                return ExchangeResult(ExchangeOutcome.ERROR, round_trip, error="response contained no choices")

            reply = envelope.choices[0].message
            tool_calls = reply.tool_calls or None
            self.conversation.append(Message(
                role="assistant",
                content=reply.content,
                tool_calls=tool_calls,
                reasoning=reply.reasoning_text,
            ))
            if reply.content:
                self.observer.on_transcript("AI", reply.content)

            if not tool_calls:
                console.success(f"Exchange finished after {round_trip} round trip(s).")
                return ExchangeResult(ExchangeOutcome.DONE, round_trip, content=reply.content)

            self.state = ExchangeState.CONTINUING
            self.observer.on_status("Processing tools...")
            if not await self._dispatch(tool_calls, token):
                return self._cancelled(round_trip)

        notice = f"Stopped after {max_round_trips} round trips without a final answer."
        console.warning(notice)
        self.observer.on_status(notice)
        return ExchangeResult(ExchangeOutcome.ROUND_TRIP_LIMIT, max_round_trips, error=notice)

    async def _dispatch(self, tool_calls: List[ToolCall], token: CancellationToken) -> bool:
        """
        Runs the calls one by one in the order given. Returns False if cancelled;
        calls that did not run still get a result turn so the group stays complete.
        """
        for index, call in enumerate(tool_calls):
            self.observer.on_status(f"Calling tool '{call.name}'...")
            await asyncio.sleep(self.options.tool_notice_delay)
            if token.cancelled:
                self._drop(tool_calls[index:])
                return False
            result = self.executor.execute(call.name, call.arguments_json)
            self.conversation.append(Message(role="tool", tool_call_id=call.id, content=result))
        return True

    def _drop(self, calls: List[ToolCall]) -> None:
        for call in calls:
            self.conversation.append(Message(role="tool", tool_call_id=call.id, content=CANCELLED_TOOL_RESULT))
        console.info(f"Dropped {len(calls)} tool call(s) after cancellation.")

    def _cancelled(self, round_trips: int) -> ExchangeResult:
        console.info("Exchange cancelled.")
        self.observer.on_status("Request cancelled.")
        return ExchangeResult(ExchangeOutcome.CANCELLED, round_trips)
