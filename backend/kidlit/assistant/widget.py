import asyncio
import enum
import logging
from collections import deque

from kidlit.assistant.base import ContentGenerator
from kidlit.assistant.llm_client import extract_generated_text
from kidlit.models import ChatMessage

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I could not process your request."
ERROR_REPLY = "Sorry, there was an error processing your request."
DEFAULT_MAX_MESSAGES = 200


class WidgetState(str, enum.Enum):
    CLOSED = "closed"
    OPEN_IDLE = "open-idle"
    AWAITING_RESPONSE = "open-awaiting-response"


class ChatWidget:
    """Floating chat assistant: transcript, open/close state and one request at a time.

    The transcript lives in memory only and keeps the newest ``max_messages``
    entries. Every prompt is sent on its own, without earlier turns.

    Closing or disposing the widget cancels the request in flight; its
    response, if it ever arrives, is discarded.
    """

    def __init__(
        self,
        generator: ContentGenerator,
        *,
        max_messages: int = DEFAULT_MAX_MESSAGES,
    ):
        if max_messages < 2:
            raise ValueError("max_messages must leave room for a user and an assistant message")
        self.generator = generator
        self.is_open = False
        self.input = ""
        self._messages: deque[ChatMessage] = deque(maxlen=max_messages)
        self._inflight: asyncio.Task | None = None

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None

    @property
    def state(self) -> WidgetState:
        if not self.is_open:
            return WidgetState.CLOSED
        if self.is_loading:
            return WidgetState.AWAITING_RESPONSE
        return WidgetState.OPEN_IDLE

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self._cancel_inflight()
        self.is_open = False

    def dispose(self) -> None:
        self.close()

    def pointer_down(self, *, inside: bool) -> None:
        """A pointer press anywhere on the page; presses outside close an open widget."""
        if self.is_open and not inside:
            self.close()

    async def submit(self, text: str | None = None) -> bool:
        """Send ``text`` (or the current input) and wait for the reply.

        Returns False without doing anything when the widget is closed, the
        text is blank or a request is already pending.
        """
        content = self.input if text is None else text
        if not self.is_open or not content.strip() or self.is_loading:
            return False

        self._messages.append(ChatMessage(role="user", content=content))
        self.input = ""

        task = asyncio.ensure_future(self.generator.generate(content))
        self._inflight = task
        try:
            # wait() leaves the task alone if this coroutine is cancelled.
            await asyncio.wait({task})
        finally:
            if not task.done():
                task.cancel()
            # close() clears _inflight, so a mismatch means the widget was closed.
            discarded = self._inflight is not task
            if not discarded:
                self._inflight = None

        if discarded or task.cancelled():
            if not task.cancelled():
                task.exception()
            logger.debug("Chat request cancelled; reply discarded.")
            return True

        self._messages.append(ChatMessage(role="assistant", content=self._reply_for(task)))
        return True

    def _reply_for(self, task: asyncio.Task) -> str:
        error = task.exception()
        if error is not None:
            logger.error("Chat request failed: %s", error)
            return ERROR_REPLY
        return extract_generated_text(task.result()) or FALLBACK_REPLY

    def _cancel_inflight(self) -> None:
        if self._inflight is not None:
            self._inflight.cancel()
            self._inflight = None
