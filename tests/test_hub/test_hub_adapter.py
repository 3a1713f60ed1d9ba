"""Tests for the integration-hub adapter."""

from __future__ import annotations

import httpx
import pytest

from autopilot.config.settings import Settings
from autopilot.exceptions import (
    ConfigurationError,
    ConnectionFailedError,
    ConnectionTimeoutError,
    HubError,
)
from autopilot.hub.adapter import HubAction, IntegrationHubAdapter
from autopilot.models.action import ErrorCategory
from autopilot.models.connection import ConnectionStatus

HUB = "https://hub.test/v1"


def _status_sequence(*statuses):
    """Responder that walks through connection statuses, repeating the last."""
    remaining = list(statuses)

    def respond(request: httpx.Request) -> httpx.Response:
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if status == 404:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(200, json={"id": "conn-1", "status": status})

    return respond


@pytest.fixture
def unconfigured_settings(mock_settings, monkeypatch):
    monkeypatch.setenv("AUTOPILOT_HUB_API_KEY", "")
    return Settings()  # type: ignore[call-arg]


class TestExecuteAction:
    @pytest.mark.asyncio
    async def test_append_row_shape(self, mock_settings, make_http):
        http, handler = make_http(
            lambda request: httpx.Response(200, json={"updatedRange": "Sheet1!A2:B2"})
        )
        hub = IntegrationHubAdapter(mock_settings, http)
        result = await hub.execute_action(
            HubAction(
                platform="google-sheets",
                action="append-values",
                params={"spreadsheetId": "s1", "values": ["a", "b"]},
            ),
            "user-1",
        )
        assert result.success is True
        assert result.message == "append-values executed successfully on google-sheets"
        assert result.data == {"updatedRange": "Sheet1!A2:B2"}

        request = handler.requests[0]
        assert str(request.url) == f"{HUB}/actions/execute"
        assert request.headers["Authorization"] == "Bearer hub-secret"
        assert handler.json_body() == {
            "actionKey": "google-sheets::append-values",
            "connectionKey": "user-1",
            "input": {"spreadsheetId": "s1", "values": [["a", "b"]]},
        }

    @pytest.mark.asyncio
    async def test_explicit_connection_key(self, mock_settings, make_http):
        http, handler = make_http(lambda request: httpx.Response(200, json={}))
        hub = IntegrationHubAdapter(mock_settings, http)
        await hub.execute_action(
            HubAction(platform="notion", action="create-page", connection_key="ck-9"), "user-1"
        )
        assert handler.json_body()["connectionKey"] == "ck-9"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["auth_required", "connection_not_found"])
    async def test_auth_required(self, mock_settings, make_http, code):
        http, _ = make_http(
            lambda request: httpx.Response(
                401, json={"code": code, "message": "Connect notion first"}
            )
        )
        result = await IntegrationHubAdapter(mock_settings, http).execute_action(
            HubAction(platform="notion", action="create-page"), "user-1"
        )
        assert result.success is False
        assert result.error == "Connect notion first"
        assert result.error_category == ErrorCategory.AUTH_REQUIRED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_unauthorized_status_without_code(self, mock_settings, make_http, status):
        http, _ = make_http(
            lambda request: httpx.Response(status, json={"message": "Unauthorized"})
        )
        result = await IntegrationHubAdapter(mock_settings, http).execute_action(
            HubAction(platform="notion", action="create-page"), "user-1"
        )
        assert result.success is False
        assert result.error == "Unauthorized"
        assert result.error_category == ErrorCategory.AUTH_REQUIRED

    @pytest.mark.asyncio
    async def test_other_failure(self, mock_settings, make_http):
        http, _ = make_http(lambda request: httpx.Response(500, text="boom"))
        result = await IntegrationHubAdapter(mock_settings, http).execute_action(
            HubAction(platform="notion", action="create-page"), "user-1"
        )
        assert result.error == "Failed to execute create-page on notion"
        assert result.error_category == ErrorCategory.EXECUTION_FAILURE

    @pytest.mark.asyncio
    async def test_transport_failure(self, mock_settings, make_http):
        def fail(request):
            raise httpx.ReadTimeout("timed out")

        http, _ = make_http(fail)
        result = await IntegrationHubAdapter(mock_settings, http).execute_action(
            HubAction(platform="notion", action="create-page"), "user-1"
        )
        assert result.error_category == ErrorCategory.TRANSPORT
        assert result.error == "timed out"

    @pytest.mark.asyncio
    async def test_unconfigured(self, unconfigured_settings, offline_http):
        http, handler = offline_http
        hub = IntegrationHubAdapter(unconfigured_settings, http)
        assert hub.is_configured is False
        result = await hub.execute_action(HubAction(platform="gmail", action="send-email"), "u")
        assert result.error_category == ErrorCategory.CONFIGURATION
        assert handler.call_count == 0


class TestConnections:
    @pytest.mark.asyncio
    async def test_initiate_records_pending(self, mock_settings, make_http, connection_store):
        http, handler = make_http(
            lambda request: httpx.Response(
                200, json={"connectionId": "conn-1", "redirectUrl": "https://hub.test/oauth"}
            )
        )
        hub = IntegrationHubAdapter(mock_settings, http, connection_store)
        initiated = await hub.initiate_connection("user-1", "ac-1", "notion")

        assert initiated.connection_id == "conn-1"
        assert initiated.redirect_url == "https://hub.test/oauth"
        assert initiated.toolkit == "notion"
        body = handler.json_body()
        assert body["authConfigId"] == "ac-1"
        assert body["redirectUri"] == f"{mock_settings.frontend_url}/credentials?hub_callback=true"

        stored = await connection_store.get("user-1", "conn-1")
        assert stored is not None
        assert stored.status == ConnectionStatus.PENDING
        assert stored.toolkit_name == "notion"

    @pytest.mark.asyncio
    async def test_initiate_requires_auth_config(self, mock_settings, offline_http):
        hub = IntegrationHubAdapter(mock_settings, offline_http[0])
        with pytest.raises(HubError, match="auth_config_id is required"):
            await hub.initiate_connection("user-1", "", "notion")

    @pytest.mark.asyncio
    async def test_initiate_without_id(self, mock_settings, make_http):
        http, _ = make_http(lambda request: httpx.Response(200, json={}))
        with pytest.raises(HubError, match="did not return a connection id"):
            await IntegrationHubAdapter(mock_settings, http).initiate_connection("u", "ac", "notion")

    @pytest.mark.asyncio
    async def test_list_connections(self, mock_settings, make_http):
        http, handler = make_http(
            lambda request: httpx.Response(200, json={"connections": [{"id": "c1"}]})
        )
        connections = await IntegrationHubAdapter(mock_settings, http).list_connections("user-1")
        assert connections == [{"id": "c1"}]
        assert handler.requests[0].url.params["userId"] == "user-1"

    @pytest.mark.asyncio
    async def test_requests_need_key(self, unconfigured_settings, offline_http):
        hub = IntegrationHubAdapter(unconfigured_settings, offline_http[0])
        with pytest.raises(ConfigurationError):
            await hub.list_connections("user-1")

    @pytest.mark.asyncio
    async def test_request_failure_raises(self, mock_settings, make_http):
        http, _ = make_http(lambda request: httpx.Response(503, json={"message": "down"}))
        with pytest.raises(HubError, match="down") as exc_info:
            await IntegrationHubAdapter(mock_settings, http).get_connection("c1")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_delete_removes_local_row(self, mock_settings, make_http, connection_store):
        await connection_store.upsert("user-1", "conn-1", "ac-1", "notion")
        http, handler = make_http(lambda request: httpx.Response(204))
        hub = IntegrationHubAdapter(mock_settings, http, connection_store)
        await hub.delete_connection("conn-1", user_id="user-1")
        assert handler.requests[0].method == "DELETE"
        assert await connection_store.get("user-1", "conn-1") is None

    @pytest.mark.asyncio
    async def test_authkit_token(self, mock_settings, make_http):
        http, handler = make_http(lambda request: httpx.Response(200, json={"token": "tk"}))
        token = await IntegrationHubAdapter(mock_settings, http).generate_authkit_token(
            "user-1", "me@example.com"
        )
        assert token == {"token": "tk"}
        assert handler.json_body() == {"userId": "user-1", "userEmail": "me@example.com"}

    def test_connection_link(self, mock_settings):
        hub = IntegrationHubAdapter(mock_settings, httpx.AsyncClient())
        link = hub.connection_link("notion", "user-1")
        assert link.startswith(f"{mock_settings.hub_connect_url}/notion?")
        assert "userId=user-1" in link

    def test_available_platforms_is_a_copy(self, mock_settings):
        hub = IntegrationHubAdapter(mock_settings, httpx.AsyncClient())
        platforms = hub.available_platforms()
        platforms.clear()
        assert "google-sheets" in hub.available_platforms()


class TestPollConnection:
    @pytest.mark.asyncio
    async def test_not_found_is_pending(self, mock_settings, make_http):
        http, _ = make_http(_status_sequence(404))
        poll = await IntegrationHubAdapter(mock_settings, http).poll_connection("conn-1")
        assert poll.status == ConnectionStatus.PENDING
        assert poll.reason == "not found yet"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("ACTIVE", ConnectionStatus.ACTIVE),
            ("active", ConnectionStatus.ACTIVE),
            ("FAILED", ConnectionStatus.FAILED),
            ("EXPIRED", ConnectionStatus.EXPIRED),
            ("INITIATED", ConnectionStatus.PENDING),
        ],
    )
    async def test_status_parsing(self, mock_settings, make_http, raw, expected):
        http, _ = make_http(_status_sequence(raw))
        poll = await IntegrationHubAdapter(mock_settings, http).poll_connection("conn-1")
        assert poll.status == expected

    @pytest.mark.asyncio
    async def test_server_error_raises(self, mock_settings, make_http):
        http, _ = make_http(lambda request: httpx.Response(500, json={}))
        with pytest.raises(HubError):
            await IntegrationHubAdapter(mock_settings, http).poll_connection("conn-1")


class TestWaitForConnection:
    @pytest.mark.asyncio
    async def test_becomes_active(self, mock_settings, make_http, connection_store):
        await connection_store.upsert("user-1", "conn-1", "ac-1", "notion")
        http, handler = make_http(_status_sequence(404, "INITIATED", "ACTIVE"))
        hub = IntegrationHubAdapter(mock_settings, http, connection_store)

        poll = await hub.wait_for_connection("conn-1", timeout_seconds=5, poll_interval=0)

        assert poll.is_active
        assert handler.call_count == 3
        stored = await connection_store.get("user-1", "conn-1")
        assert stored.status == ConnectionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_failed(self, mock_settings, make_http, connection_store):
        await connection_store.upsert("user-1", "conn-1", "ac-1", "notion")
        http, _ = make_http(_status_sequence("PENDING", "FAILED"))
        hub = IntegrationHubAdapter(mock_settings, http, connection_store)

        with pytest.raises(ConnectionFailedError, match="Connection failed"):
            await hub.wait_for_connection("conn-1", timeout_seconds=5, poll_interval=0)

        stored = await connection_store.get("user-1", "conn-1")
        assert stored.status == ConnectionStatus.FAILED

    @pytest.mark.asyncio
    async def test_expired(self, mock_settings, make_http):
        http, _ = make_http(_status_sequence("EXPIRED"))
        with pytest.raises(ConnectionFailedError, match="Connection expired"):
            await IntegrationHubAdapter(mock_settings, http).wait_for_connection(
                "conn-1", timeout_seconds=5, poll_interval=0
            )

    @pytest.mark.asyncio
    async def test_timeout(self, mock_settings, make_http):
        http, handler = make_http(_status_sequence("PENDING"))
        with pytest.raises(ConnectionTimeoutError, match="Connection timeout"):
            await IntegrationHubAdapter(mock_settings, http).wait_for_connection(
                "conn-1", timeout_seconds=0.05, poll_interval=0.01
            )
        assert handler.call_count >= 1


class TestHandleConnectionEvent:
    @pytest.mark.asyncio
    async def test_updates_status(self, mock_settings, connection_store):
        await connection_store.upsert("user-1", "conn-1", "ac-1", "notion")
        hub = IntegrationHubAdapter(mock_settings, httpx.AsyncClient(), connection_store)
        await hub.handle_connection_event({"connectionId": "conn-1", "status": "expired"})
        stored = await connection_store.get("user-1", "conn-1")
        assert stored.status == ConnectionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_ignores_incomplete_event(self, mock_settings, connection_store):
        await connection_store.upsert("user-1", "conn-1", "ac-1", "notion")
        hub = IntegrationHubAdapter(mock_settings, httpx.AsyncClient(), connection_store)
        await hub.handle_connection_event({"connectionId": "conn-1"})
        stored = await connection_store.get("user-1", "conn-1")
        assert stored.status == ConnectionStatus.PENDING
