import ssl

import pytest

from restwire._utils import get_httpx_client_kwargs, user_agent_value
from restwire._utils._ssl_context import expand_path


class TestHttpxClientKwargs:
    def test_defaults(self) -> None:
        kwargs = get_httpx_client_kwargs()

        assert isinstance(kwargs["verify"], ssl.SSLContext)
        assert kwargs["follow_redirects"] is True
        assert "timeout" not in kwargs

    def test_timeout_and_redirects(self) -> None:
        kwargs = get_httpx_client_kwargs(timeout=7.5, follow_redirects=False)

        assert kwargs["timeout"] == 7.5
        assert kwargs["follow_redirects"] is False

    def test_expand_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CERTS_HOME", "/opt/certs")

        assert expand_path("$CERTS_HOME/ca.pem") == "/opt/certs/ca.pem"
        assert expand_path(None) is None


class TestUserAgent:
    def test_prefix(self) -> None:
        assert user_agent_value().startswith("Restwire.Python/")

    def test_component(self) -> None:
        value = user_agent_value("Tests")

        assert value.startswith("Restwire.Python/Tests/")
