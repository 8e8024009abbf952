import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from restwire import (
    ErrorKind,
    FileUpload,
    HttpxTransport,
    Part,
    Request,
    RestwireConfig,
    TransportError,
)
from restwire._utils import user_agent_value
from restwire._utils.constants import HEADER_USER_AGENT


@pytest.fixture
def transport(config: RestwireConfig) -> HttpxTransport:
    return HttpxTransport(config)


class TestHttpxTransport:
    class TestRequestMapping:
        def test_query_and_headers(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(
                url=f"{base_url}/users?page=2&active=true&tag=a&tag=b",
                status_code=200,
                headers={"X-Total": "7"},
                json=[{"id": 1}],
            )

            response = transport.execute(
                Request(
                    method="GET",
                    url=f"{base_url}/users",
                    headers={"X-Trace": "abc"},
                    query={"page": 2, "active": True, "tag": ["a", "b"]},
                )
            )

            assert response.code == 200
            assert response.reason_phrase == "OK"
            assert response.header("x-total") == "7"
            assert json.loads(response.raw_body) == [{"id": 1}]
            assert response.body is None

            sent_request = httpx_mock.get_request()
            if sent_request is None:
                raise Exception("No request was sent")

            assert sent_request.method == "GET"
            assert sent_request.headers["X-Trace"] == "abc"
            assert sent_request.headers[HEADER_USER_AGENT] == user_agent_value()

        def test_json_body(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/users", method="POST", status_code=201)

            transport.execute(
                Request(method="POST", url=f"{base_url}/users", body={"name": "Ada"})
            )

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.headers["Content-Type"] == "application/json"
            assert json.loads(sent_request.content) == {"name": "Ada"}

        def test_encoded_body_is_sent_verbatim(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/users", method="POST")

            transport.execute(
                Request(
                    method="POST",
                    url=f"{base_url}/users",
                    headers={"Content-Type": "application/json"},
                    body='{"name": "Ada"}',
                )
            )

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.content == b'{"name": "Ada"}'

        def test_form_body(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/login", method="POST")

            transport.execute(
                Request(
                    method="POST",
                    url=f"{base_url}/login",
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    body={"user": "ada", "remember": True},
                )
            )

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.content == b"user=ada&remember=true"

        def test_multipart_body(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/upload", method="POST")

            transport.execute(
                Request(
                    method="POST",
                    url=f"{base_url}/upload",
                    body=[
                        Part("description", "quarterly"),
                        Part(
                            "file",
                            FileUpload.from_bytes(b"a,b", "report.csv", "text/csv"),
                        ),
                    ],
                )
            )

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.headers["Content-Type"].startswith(
                "multipart/form-data; boundary="
            )
            content = sent_request.content
            assert b'name="description"' in content
            assert b"quarterly" in content
            assert b'name="file"; filename="report.csv"' in content
            assert b"Content-Type: text/csv" in content
            assert b"a,b" in content

        def test_per_request_timeout(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/slow")

            transport.execute(
                Request(method="GET", url=f"{base_url}/slow", timeout=1.5)
            )

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.extensions["timeout"]["read"] == 1.5

        def test_config_headers(self, httpx_mock: HTTPXMock, base_url: str) -> None:
            transport = HttpxTransport(
                RestwireConfig(base_url=base_url, headers={"X-Tenant": "acme"})
            )
            httpx_mock.add_response(url=f"{base_url}/users")

            transport.execute(Request(method="GET", url=f"{base_url}/users"))

            sent_request = httpx_mock.get_request()
            assert sent_request is not None
            assert sent_request.headers["X-Tenant"] == "acme"

    class TestErrorMapping:
        @pytest.mark.parametrize(
            "exception, kind",
            [
                (httpx.ConnectTimeout("timed out"), ErrorKind.TIMEOUT),
                (httpx.ReadTimeout("timed out"), ErrorKind.TIMEOUT),
                (httpx.ConnectError("refused"), ErrorKind.CONNECT),
                (httpx.ReadError("reset"), ErrorKind.NETWORK),
                (httpx.RemoteProtocolError("bad frame"), ErrorKind.PROTOCOL),
                (httpx.UnsupportedProtocol("ftp"), ErrorKind.UNKNOWN),
            ],
        )
        def test_kind(
            self,
            httpx_mock: HTTPXMock,
            transport: HttpxTransport,
            base_url: str,
            exception: httpx.RequestError,
            kind: ErrorKind,
        ) -> None:
            httpx_mock.add_exception(exception)

            with pytest.raises(TransportError) as exc_info:
                transport.execute(Request(method="GET", url=f"{base_url}/users"))

            assert exc_info.value.kind == kind
            assert exc_info.value.__cause__ is exception

        def test_error_status_is_a_response(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(url=f"{base_url}/users", status_code=503)

            response = transport.execute(Request(method="GET", url=f"{base_url}/users"))

            assert response.code == 503
            assert not response.is_successful

    class TestAsync:
        @pytest.mark.anyio
        async def test_execute_async(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_response(
                url=f"{base_url}/users/1", status_code=200, json={"id": 1}
            )

            response = await transport.execute_async(
                Request(method="GET", url=f"{base_url}/users/1")
            )
            await transport.aclose()

            assert response.code == 200
            assert json.loads(response.raw_body) == {"id": 1}

        @pytest.mark.anyio
        async def test_error_mapping_async(
            self, httpx_mock: HTTPXMock, transport: HttpxTransport, base_url: str
        ) -> None:
            httpx_mock.add_exception(httpx.ConnectError("refused"))

            with pytest.raises(TransportError) as exc_info:
                await transport.execute_async(
                    Request(method="GET", url=f"{base_url}/users")
                )

            assert exc_info.value.kind == ErrorKind.CONNECT

    class TestOwnership:
        def test_supplied_client_is_not_closed(self) -> None:
            client = httpx.Client()

            with HttpxTransport(client=client) as transport:
                assert transport.client is client

            assert not client.is_closed
            client.close()

        def test_owned_client_is_closed(self, config: RestwireConfig) -> None:
            transport = HttpxTransport(config)
            client = transport.client

            transport.close()

            assert client.is_closed
