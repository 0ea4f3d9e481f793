"""
Unit tests for the Asana client request primitives.

Requests are prepared with a real requests.Session; only ``send`` is patched.
"""

import io
import json
import logging
from dataclasses import dataclass
from typing import List, Optional
from unittest.mock import Mock, patch
from urllib.parse import urlsplit

import pytest
import requests
from pydantic import BaseModel

from asana_client import (
    APIError,
    BASE_URL,
    Client,
    ClientConfig,
    ConnectionFailedError,
    FAST_API_HEADER,
    InvalidPageSizeError,
    InvalidPathError,
    MissingDataError,
    Options,
    PayloadValidationError,
    RequestBuildError,
    TimeoutError,
    TransportError,
    decode_query,
)


class Record(BaseModel):
    gid: str
    name: Optional[str] = None


@dataclass
class NamedPayload:
    name: str

    def validate(self):
        if not self.name:
            raise ValueError("name is required")


def sent_request(send: Mock) -> requests.PreparedRequest:
    return send.call_args[0][0]


def sent_query(send: Mock) -> dict:
    return decode_query(urlsplit(sent_request(send).url).query)


class TestClientInitialization:

    def test_defaults(self):
        with Client() as client:
            assert client.config.base_url == BASE_URL
            assert client.config.fast_api is True
            assert client.config.default_options == Options()

    def test_base_url_string(self):
        with Client("https://example.test/api") as client:
            assert client.config.base_url == "https://example.test/api"

    def test_external_session_not_closed(self):
        session = Mock(spec=requests.Session)
        Client(ClientConfig(), session=session).close()
        session.close.assert_not_called()

    def test_owned_session_closed(self):
        client = Client()
        with patch.object(client.session, "close") as close:
            client.close()
        close.assert_called_once()

    def test_token_sent_on_external_session(self, make_response):
        session = requests.Session()
        client = Client(ClientConfig(base_url="https://asana.test", access_token="tok"), session=session)
        with patch.object(session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.get("/users/me")
        assert sent_request(send).headers["Authorization"] == "Bearer tok"
        assert "Authorization" not in session.headers

    def test_reconfigure(self, client):
        before = client.config
        after = client.reconfigure(fast_api=False, default_options=Options(limit=5))
        assert client.config is after
        assert after.fast_api is False
        assert after.default_options.limit == 5
        assert before.fast_api is True
        assert after.access_token == before.access_token


class TestGet:

    def test_decodes_result(self, client, make_response):
        with patch.object(client.session, "send",
                          return_value=make_response(200, {"data": {"gid": "1"}, "next_page": None})) as send:
            result, next_page = client.get("/projects/1", None, Record)

        assert result == Record(gid="1")
        assert next_page is None
        request = sent_request(send)
        assert request.method == "GET"
        assert request.url == "https://asana.test/api/1.0/projects/1"
        assert request.body is None

    def test_headers(self, client, make_response):
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.get("/users/me")

        headers = sent_request(send).headers
        assert headers[FAST_API_HEADER] == "true"
        assert headers["Authorization"] == "Bearer secret-token"
        assert headers["Accept"] == "application/json"

    def test_fast_api_disabled(self, client, make_response):
        client.reconfigure(fast_api=False)
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.get("/users/me")
        assert FAST_API_HEADER not in sent_request(send).headers

    def test_query_layering(self, client, make_response):
        client.reconfigure(default_options=Options(limit=100, fields=["name"]))
        with patch.object(client.session, "send", return_value=make_response(200, {"data": []})) as send:
            client.get("/tasks", {"project": "7", "limit": 50}, List[Record],
                       Options(limit=20), Options(offset="abc"))

        assert sent_query(send) == {
            "limit": ["20"],
            "opt_fields": ["name"],
            "project": ["7"],
            "offset": ["abc"],
        }

    def test_no_query_string_without_parameters(self, client, make_response):
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.get("/users/me")
        assert "?" not in sent_request(send).url

    def test_returns_cursor(self, client, make_response):
        payload = {"data": [{"gid": "1"}], "next_page": {"offset": "n1", "path": "/tasks?offset=n1", "uri": "u"}}
        with patch.object(client.session, "send", return_value=make_response(200, payload)):
            result, next_page = client.get("/tasks", None, List[Record])
        assert [r.gid for r in result] == ["1"]
        assert next_page.offset == "n1"

    def test_validation_failure_sends_nothing(self, client):
        with patch.object(client.session, "send") as send:
            with pytest.raises(PayloadValidationError) as exc_info:
                client.get("/tasks", NamedPayload(name=""))
        send.assert_not_called()
        assert exc_info.value.operation == "GET /tasks"

    def test_query_encoding_failure(self, client):
        with patch.object(client.session, "send") as send:
            with pytest.raises(RequestBuildError) as exc_info:
                client.get("/tasks", object())
        send.assert_not_called()
        assert exc_info.value.stage == "query"

    def test_invalid_path(self, client):
        with patch.object(client.session, "send") as send:
            with pytest.raises(InvalidPathError):
                client.get("projects")
        send.assert_not_called()

    def test_api_error(self, client, make_response):
        response = make_response(404, {"errors": [{"message": "not found"}]}, reason="Not Found")
        with patch.object(client.session, "send", return_value=response):
            with pytest.raises(APIError) as exc_info:
                client.get("/projects/404", None, Record)
        assert exc_info.value.is_not_found
        assert "not found" in str(exc_info.value)

    def test_missing_data(self, client, make_response):
        with patch.object(client.session, "send", return_value=make_response(200, {"data": None})):
            with pytest.raises(MissingDataError):
                client.get("/projects/1", None, Record)

    def test_timeout_passed_through(self, client, make_response):
        client.reconfigure(timeout=2.5)
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.get("/users/me")
        assert send.call_args[1]["timeout"] == 2.5


class TestTransportErrors:

    @pytest.mark.parametrize("raised, expected", [
        (requests.Timeout("slow"), TimeoutError),
        (requests.ConnectionError("refused"), ConnectionFailedError),
        (requests.TooManyRedirects("loop"), TransportError),
    ])
    def test_mapping(self, client, raised, expected):
        with patch.object(client.session, "send", side_effect=raised):
            with pytest.raises(expected) as exc_info:
                client.get("/users/me")
        assert exc_info.value.operation == "GET /users/me"
        assert exc_info.value.cause is raised
        assert exc_info.value.__cause__ is raised

    def test_write_error_names_method(self, client):
        with patch.object(client.session, "send", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(TransportError) as exc_info:
                client.put("/tasks/1", {"name": "x"})
        assert exc_info.value.message.startswith("PUT error")


class TestWrites:

    def test_post_body(self, client, make_response):
        with patch.object(client.session, "send",
                          return_value=make_response(201, {"data": {"gid": "9", "name": "New"}})) as send:
            result = client.post("/projects", NamedPayload(name="New"), Record)

        assert result == Record(gid="9", name="New")
        request = sent_request(send)
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers[FAST_API_HEADER] == "true"
        assert json.loads(request.body) == {"data": {"name": "New"}}

    def test_options_merged_over_defaults(self, client, make_response):
        client.reconfigure(default_options=Options(pretty=True, fields=["gid"]))
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})) as send:
            client.put("/tasks/1", {"name": "Renamed"}, None, Options(fields=["name", "notes"]))

        request = sent_request(send)
        assert request.method == "PUT"
        assert json.loads(request.body) == {
            "data": {"name": "Renamed"},
            "options": {"pretty": True, "fields": ["name", "notes"]},
        }

    def test_caller_options_untouched(self, client, make_response):
        client.reconfigure(default_options=Options(pretty=True))
        call_options = Options(limit=5)
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {}})):
            client.post("/tasks", {"name": "x"}, None, call_options)
        assert call_options == Options(limit=5)

    def test_validation_failure_sends_nothing(self, client):
        with patch.object(client.session, "send") as send:
            with pytest.raises(PayloadValidationError):
                client.post("/projects", NamedPayload(name=""))
        send.assert_not_called()

    def test_serialization_failure(self, client):
        with patch.object(client.session, "send") as send:
            with pytest.raises(RequestBuildError) as exc_info:
                client.post("/projects", {"name": object()})
        send.assert_not_called()
        assert exc_info.value.stage == "serialize"
        assert exc_info.value.operation == "POST /projects"

    def test_invalid_path(self, client):
        with pytest.raises(InvalidPathError):
            client.post("projects/1/sections", {"name": "x"})


class TestMultipart:

    @staticmethod
    def capture_body(captured, response):
        def send(prepared, **kwargs):
            captured["request"] = prepared
            captured["body"] = b"".join(prepared.body)
            return response
        return send

    def test_upload(self, client, make_response):
        captured = {}
        stream = Mock(wraps=io.BytesIO(b"file content"))
        response = make_response(200, {"data": {"gid": "att1", "name": "notes.txt"}})
        with patch.object(client.session, "send", side_effect=self.capture_body(captured, response)):
            result = client.post_multipart("/tasks/1/attachments", "file", stream, "notes.txt", "text/plain", Record)

        assert result.gid == "att1"
        request = captured["request"]
        content_type = request.headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        boundary = content_type.split("boundary=")[1]
        assert captured["body"] == (
            f"--{boundary}\r\n"
            'Content-Disposition: form-data; name="file"; filename="notes.txt"\r\n'
            "Content-Type: text/plain\r\n\r\n"
            "file content"
            f"\r\n--{boundary}--\r\n"
        ).encode()
        assert request.headers[FAST_API_HEADER] == "true"
        stream.close.assert_called_once()

    def test_zero_length_file(self, client, make_response):
        captured = {}
        stream = Mock(wraps=io.BytesIO(b""))
        response = make_response(200, {"data": {"gid": "att2"}})
        with patch.object(client.session, "send", side_effect=self.capture_body(captured, response)):
            client.post_multipart("/tasks/1/attachments", "file", stream, "empty.txt", "text/plain")

        boundary = captured["request"].headers["Content-Type"].split("boundary=")[1]
        assert captured["body"].endswith(f"Content-Type: text/plain\r\n\r\n\r\n--{boundary}--\r\n".encode())
        stream.close.assert_called_once()

    def test_stream_closed_on_invalid_path(self, client):
        stream = Mock(wraps=io.BytesIO(b"data"))
        with pytest.raises(InvalidPathError):
            client.post_multipart("tasks/1/attachments", "file", stream, "a.txt", "text/plain")
        stream.close.assert_called_once()

    def test_stream_closed_on_api_error(self, client, make_response):
        stream = Mock(wraps=io.BytesIO(b"data"))
        with patch.object(client.session, "send", return_value=make_response(403, {"errors": [{"message": "no"}]})):
            with pytest.raises(APIError):
                client.post_multipart("/tasks/1/attachments", "file", stream, "a.txt", "text/plain")
        stream.close.assert_called_once()

    def test_stream_closed_on_transport_error(self, client):
        stream = Mock(wraps=io.BytesIO(b"data"))
        with patch.object(client.session, "send", side_effect=requests.ConnectionError("reset")):
            with pytest.raises(ConnectionFailedError):
                client.post_multipart("/tasks/1/attachments", "file", stream, "a.txt", "text/plain")
        stream.close.assert_called_once()


class TestGetAll:

    def test_accumulates_pages(self, client, make_response):
        responses = [
            make_response(200, {"data": [{"gid": "1"}], "next_page": {"offset": "a"}}),
            make_response(200, {"data": [{"gid": "2"}], "next_page": {"offset": "b"}}),
            make_response(200, {"data": [{"gid": "3"}], "next_page": None}),
        ]
        with patch.object(client.session, "send", side_effect=responses) as send:
            result = client.get_all("/workspaces/1/projects", None, Record, page_size=50)

        assert [r.gid for r in result] == ["1", "2", "3"]
        offsets = [decode_query(urlsplit(call[0][0].url).query).get("offset") for call in send.call_args_list]
        assert offsets == [None, ["a"], ["b"]]
        assert all(
            decode_query(urlsplit(call[0][0].url).query)["limit"] == ["50"]
            for call in send.call_args_list
        )

    def test_error_aborts(self, client, make_response):
        responses = [
            make_response(200, {"data": [{"gid": "1"}], "next_page": {"offset": "a"}}),
            make_response(500, {"errors": [{"message": "boom"}]}),
        ]
        with patch.object(client.session, "send", side_effect=responses):
            with pytest.raises(APIError) as exc_info:
                client.get_all("/workspaces/1/projects", None, Record)
        assert exc_info.value.is_recoverable

    @pytest.mark.parametrize("page_size", [0, 101, 500])
    def test_page_size_out_of_range(self, client, page_size):
        with patch.object(client.session, "send") as send:
            with pytest.raises(InvalidPageSizeError):
                client.get_all("/workspaces/1/projects", None, Record, page_size=page_size)
        send.assert_not_called()


class TestLogging:

    def test_debug_logs_requests(self, make_response, caplog):
        caplog.set_level(logging.DEBUG)
        with Client(ClientConfig(base_url="https://asana.test", debug=True)) as client:
            with patch.object(client.session, "send", return_value=make_response(200, {"data": {"gid": "1"}})):
                client.post("/projects", {"name": "Logged"})

        assert "POST /projects" in caplog.text
        assert '"name": "Logged"' in caplog.text

    def test_info_and_trace_follow_verbosity(self, client, caplog):
        caplog.set_level(logging.INFO, logger="asana_client.client")
        client.info("hidden info")
        client.reconfigure(verbosity=1)
        client.info("shown info")
        client.trace("hidden trace")
        client.reconfigure(verbosity=2)
        client.trace("shown trace")

        assert "hidden" not in caplog.text
        assert "shown info" in caplog.text
        assert "shown trace" in caplog.text

    def test_debug_response_logged_when_root_at_info(self, make_response):
        records = []
        handler = logging.Handler()
        handler.emit = records.append
        root = logging.getLogger()
        previous_level = root.level
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        try:
            with Client(ClientConfig(base_url="https://asana.test", debug=True)) as client:
                with patch.object(client.session, "send",
                                  return_value=make_response(200, {"data": {"gid": "RESP1"}})):
                    client.post("/projects", {"name": "Logged"})
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)

        messages = [record.getMessage() for record in records]
        assert any("RESP1" in message for message in messages)
        assert any("POST /projects" in message for message in messages)

    def test_no_response_log_without_debug(self, client, make_response, caplog):
        caplog.set_level(logging.DEBUG)
        with patch.object(client.session, "send", return_value=make_response(200, {"data": {"gid": "QUIET"}})):
            client.post("/projects", {"name": "Quiet"})
        assert "QUIET" not in caplog.text

    def test_debug_toggle_sets_package_level(self):
        package_logger = logging.getLogger("asana_client")
        client = Client(ClientConfig(debug=True))
        assert package_logger.level == logging.DEBUG

        client.reconfigure(debug=False)
        assert package_logger.level == logging.NOTSET

    def test_non_debug_client_leaves_level_alone(self):
        package_logger = logging.getLogger("asana_client")
        package_logger.setLevel(logging.WARNING)
        client = Client(ClientConfig())
        client.reconfigure(verbosity=1)
        assert package_logger.level == logging.WARNING
