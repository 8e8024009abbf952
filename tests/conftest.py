from typing import Any, Callable, List, Sequence, Union

import pytest

from restwire import Request, Response, RestwireConfig

Outcome = Union[Response, BaseException]


class ScriptedTransport:
    """Transport replaying a fixed sequence of responses and errors.

    Once the script is down to its last outcome, that outcome repeats.
    """

    def __init__(self, outcomes: Sequence[Outcome]) -> None:
        self._outcomes: List[Outcome] = list(outcomes)
        self.requests: List[Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def execute(self, request: Request) -> Response:
        self.requests.append(request)
        if len(self._outcomes) > 1:
            outcome = self._outcomes.pop(0)
        else:
            outcome = self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def execute_async(self, request: Request) -> Response:
        return self.execute(request)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    monkeypatch.delenv("RESTWIRE_BASE_URL", raising=False)
    monkeypatch.delenv("RESTWIRE_TIMEOUT", raising=False)
    monkeypatch.delenv("RESTWIRE_ACCESS_TOKEN", raising=False)


@pytest.fixture
def base_url() -> str:
    return "https://api.example.com"


@pytest.fixture
def config(base_url: str) -> RestwireConfig:
    return RestwireConfig(base_url=base_url)


@pytest.fixture
def scripted_transport() -> Callable[..., Any]:
    """Factory building a ``ScriptedTransport`` from outcomes."""

    def _make(*outcomes: Outcome) -> ScriptedTransport:
        return ScriptedTransport(outcomes)

    return _make


@pytest.fixture
def ok() -> Callable[..., Response]:
    """Factory for raw responses as a transport would return them."""

    def _make(
        code: int = 200, raw_body: bytes = b"", headers: Any = None, reason: str = ""
    ) -> Response:
        return Response(
            code=code, reason_phrase=reason, headers=headers, raw_body=raw_body
        )

    return _make
