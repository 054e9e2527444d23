"""Framework-agnostic middleware chain.

A middleware is ``async (exchange, call_next) -> None``. It either ends the
exchange by calling ``exchange.emit(status, body)`` or awaits ``call_next()``
to hand control to the next unit. Middleware run strictly in registration
order; once one of them returns without calling ``call_next`` nothing after
it runs for that request.

Components that need to observe the outgoing response do so by decorating
the exchange's :class:`ResponseEmitter` (see :meth:`Exchange.wrap_emitter`)
instead of patching send functions on a framework object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence


class ResponseEmitter(Protocol):
    """Anything able to emit the final status/body of an exchange."""

    def emit(self, status: int, body: Any) -> None:
        ...


class ResponseAlreadySentError(RuntimeError):
    """Raised when an exchange is emitted more than once."""


@dataclass
class Exchange:
    """A single request/response pair travelling through the chain.

    Attributes:
        method: Upper-case HTTP method.
        path: Request path without query string.
        query_string: Raw query string without the leading ``?``.
        client: Client identifier (usually the source IP).
        request_headers: Incoming headers (case-insensitive mapping when
            provided by the framework).
        lang: Language code used for user-facing messages.
        timestamp: ISO-8601 timestamp assigned when the request arrived.
        state: Attribute bag shared with the hosting framework.
        headers: Response headers accumulated by middleware and handler.
        status: Emitted status code (None until emitted).
        body: Emitted JSON-serializable body.
    """

    method: str
    path: str
    query_string: str = ""
    client: str = "unknown"
    request_headers: Mapping[str, str] = field(default_factory=dict)
    lang: str = "es"
    timestamp: str | None = None
    state: Any = field(default_factory=SimpleNamespace)
    headers: dict[str, str] = field(default_factory=dict)
    status: int | None = None
    body: Any = None
    _emitter: ResponseEmitter | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self._emitter is None:
            self._emitter = BufferedEmitter(self)

    @property
    def target(self) -> str:
        """Literal request target: path plus ``?query`` when present."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @property
    def sent(self) -> bool:
        return self.status is not None

    def set_header(self, name: str, value: object) -> None:
        self.headers[name] = str(value)

    def wrap_emitter(self, factory: Callable[[ResponseEmitter], ResponseEmitter]) -> None:
        """Decorate the current emitter; ``factory`` receives the one it wraps."""
        self._emitter = factory(self._emitter)

    def emit(self, status: int, body: Any) -> None:
        """Send the response through the (possibly decorated) emitter."""
        if self.sent:
            raise ResponseAlreadySentError(f"{self.method} {self.target} already emitted")
        self._emitter.emit(status, body)


class BufferedEmitter:
    """Terminal emitter: records status and body on the exchange."""

    def __init__(self, exchange: Exchange) -> None:
        self._exchange = exchange

    def emit(self, status: int, body: Any) -> None:
        self._exchange.status = status
        self._exchange.body = body


NextFn = Callable[[], Awaitable[None]]
Middleware = Callable[[Exchange, NextFn], Awaitable[None]]
Handler = Callable[[Exchange], Awaitable[None]]


async def run_chain(
    middlewares: Sequence[Middleware],
    handler: Handler,
    exchange: Exchange,
) -> Exchange:
    """Run ``middlewares`` in order, then ``handler``, over one exchange.

    Exceptions raised anywhere in the chain propagate unchanged.

    Returns:
        The same exchange, for convenience.
    """

    async def dispatch(index: int) -> None:
        if index == len(middlewares):
            await handler(exchange)
            return

        async def call_next() -> None:
            await dispatch(index + 1)

        await middlewares[index](exchange, call_next)

    await dispatch(0)
    return exchange
