"""Scripted LLM transport for testing prompt handling."""

from collections import deque
from collections.abc import Callable, Iterable

from clip_curator.adapters.llm.base import LLMMessage, LLMProvider, LLMResponse
from clip_curator.logging import get_logger

logger = get_logger(__name__)

Reply = str | BaseException | Callable[[list[LLMMessage]], str]


class StubLLMProvider(LLMProvider):
    """Transport that replays scripted replies in order.

    A reply may be a string, an exception instance (raised) or a callable
    receiving the messages. When the script runs out, ``default_reply`` is
    returned. Every request is recorded in ``calls``.
    """

    def __init__(self, replies: Iterable[Reply] = (), default_reply: str = "{}") -> None:
        self._replies: deque[Reply] = deque(replies)
        self.default_reply = default_reply
        self.calls: list[list[LLMMessage]] = []

    @property
    def name(self) -> str:
        return "stub"

    @property
    def model(self) -> str:
        return "stub-model"

    def queue(self, *replies: Reply) -> None:
        self._replies.extend(replies)

    async def complete(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 4096,  # noqa: ARG002
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append(messages)
        reply = self._replies.popleft() if self._replies else self.default_reply

        logger.debug("stub_llm_complete", message_count=len(messages), json_mode=json_mode)

        if isinstance(reply, BaseException):
            raise reply
        content = reply(messages) if callable(reply) else reply
        return LLMResponse(content=content, model=self.model, finish_reason="stop")
