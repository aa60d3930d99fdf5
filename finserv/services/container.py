"""Service container.

Owns every long-lived collaborator of one application instance: the
credential store, token service, outbound HTTP client, chat proxy, throttle
state and auth gateway. Nothing here is module-global, so each test can build
its own isolated container and hand it to ``create_app``.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from finserv.auth.jwt_auth import TokenService
from finserv.config.settings import Settings
from finserv.services.auth_gateway import AuthGateway
from finserv.services.chat_proxy import ChatProxy
from finserv.utils.debug import print__startup_debug
from finserv.utils.rate_limiting import RateLimiter
from userstore.base import CredentialStore
from userstore.factory import create_credential_store


@dataclass
class AppServices:
    settings: Settings
    store: CredentialStore
    token_service: TokenService
    http_client: httpx.AsyncClient
    chat_proxy: ChatProxy
    rate_limiter: Optional[RateLimiter]
    auth_gateway: AuthGateway

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: CredentialStore = None,
        http_client: httpx.AsyncClient = None,
        rate_limiter: RateLimiter = None,
    ) -> "AppServices":
        """Build the production wiring; any collaborator may be overridden."""
        store = store if store is not None else create_credential_store(settings)
        token_service = TokenService(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.jwt_ttl_seconds,
        )
        http_client = http_client if http_client is not None else httpx.AsyncClient()
        return cls(
            settings=settings,
            store=store,
            token_service=token_service,
            http_client=http_client,
            chat_proxy=ChatProxy.from_settings(settings, http_client),
            rate_limiter=(
                rate_limiter
                if rate_limiter is not None
                else RateLimiter.from_settings(settings)
            ),
            auth_gateway=AuthGateway(store, token_service),
        )

    async def init(self) -> None:
        """Open the store. An unreachable store is fatal here."""
        print__startup_debug(f"🚀 SERVICES INIT: store backend={self.store.backend_name}")
        await self.store.init()
        if not await self.store.ping():
            raise RuntimeError(
                f"Credential store ({self.store.backend_name}) is not reachable"
            )
        if not self.settings.gemini_api_key:
            print__startup_debug(
                "⚠️ GEMINI_API_KEY is not set: chat relay will answer with the fallback reply"
            )
        print__startup_debug("✅ SERVICES INIT: ready")

    async def shutdown(self) -> None:
        print__startup_debug("🛑 SERVICES SHUTDOWN")
        try:
            await self.store.shutdown()
        finally:
            await self.http_client.aclose()
