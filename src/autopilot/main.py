"""Entry point and dependency wiring."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from autopilot.adapters.gmail import GmailAdapter
from autopilot.adapters.registry import AdapterRegistry
from autopilot.adapters.sheets import SheetsAdapter
from autopilot.adapters.slack import SlackAdapter
from autopilot.adapters.telegram import TelegramAdapter
from autopilot.analyzer.prompt_analyzer import PromptAnalyzer
from autopilot.chat.agent import ChatAgent
from autopilot.cli.app import app
from autopilot.config.settings import Settings
from autopilot.credentials.crypto import TokenCipher
from autopilot.dispatch.orchestrator import Orchestrator
from autopilot.hub.adapter import CONNECTION_STATUS_EVENT, IntegrationHubAdapter
from autopilot.hub.webhooks import WebhookEndpoint, WebhookReceiver
from autopilot.models.action import DispatchStrategy
from autopilot.oauth.flow import OAuthFlow
from autopilot.protocol.facade import ProtocolFacade
from autopilot.storage.connections import ConnectionStore
from autopilot.storage.credentials import CredentialStore
from autopilot.storage.database import Database
from autopilot.storage.executions import ExecutionLog


@dataclass
class Services:
    settings: Settings
    database: Database
    http: httpx.AsyncClient
    credentials: CredentialStore
    connections: ConnectionStore
    history: ExecutionLog
    registry: AdapterRegistry
    hub: IntegrationHubAdapter
    orchestrator: Orchestrator
    facade: ProtocolFacade
    webhooks: WebhookReceiver
    webhook_endpoint: WebhookEndpoint
    oauth: OAuthFlow
    chat: ChatAgent

    async def start(self) -> None:
        await self.database.initialize()

    async def close(self) -> None:
        await self.http.aclose()
        await self.database.close()


def build_services(
    settings: Settings | None = None,
    http: httpx.AsyncClient | None = None,
) -> Services:
    settings = settings or Settings()  # type: ignore[call-arg]
    http = http or httpx.AsyncClient(timeout=settings.http_timeout)

    database = Database(db_path=settings.db_path)
    credentials = CredentialStore(database, TokenCipher(settings.encryption_key))
    connections = ConnectionStore(database)
    history = ExecutionLog(database)

    registry = AdapterRegistry(
        [
            GmailAdapter(credentials, http),
            SlackAdapter(credentials, http),
            SheetsAdapter(credentials, http),
            TelegramAdapter(settings.telegram_bot_token, http),
        ]
    )
    hub = IntegrationHubAdapter(settings, http, connections)
    orchestrator = Orchestrator(
        analyzer=PromptAnalyzer(settings),
        registry=registry,
        hub=hub,
        strategy=DispatchStrategy(settings.dispatch_strategy),
        history=history,
    )

    webhooks = WebhookReceiver(settings)
    webhooks.on(CONNECTION_STATUS_EVENT, hub.handle_connection_event)

    return Services(
        settings=settings,
        database=database,
        http=http,
        credentials=credentials,
        connections=connections,
        history=history,
        registry=registry,
        hub=hub,
        orchestrator=orchestrator,
        facade=ProtocolFacade(orchestrator, registry, credentials),
        webhooks=webhooks,
        webhook_endpoint=WebhookEndpoint(webhooks),
        oauth=OAuthFlow(settings, credentials, http),
        chat=ChatAgent(settings, orchestrator),
    )


if __name__ == "__main__":
    app()
