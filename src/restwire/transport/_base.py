from typing import Protocol, runtime_checkable

from ..models.http import Request, Response


@runtime_checkable
class Transport(Protocol):
    """Sends one request over the wire and returns the raw response.

    Implementations raise ``TransportError``, tagged with an ``ErrorKind``,
    when no response could be obtained.
    """

    def execute(self, request: Request) -> Response: ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def execute_async(self, request: Request) -> Response: ...
