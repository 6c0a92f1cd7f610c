"""
Process-wide service context.

Collaborator clients are constructed once at application startup, injected into
handlers through get_context, and closed at shutdown.
"""

import logging
from dataclasses import dataclass

from fastapi import Request

from artmarket.core.config import Settings
from artmarket.services.integrations.push_client import PushClient
from artmarket.services.integrations.search_client import SearchClient

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    settings: Settings
    search: SearchClient
    push: PushClient

    async def aclose(self) -> None:
        await self.search.aclose()
        await self.push.aclose()
        logger.info("Service context closed")


def build_context(settings: Settings) -> ServiceContext:
    search = SearchClient(
        base_url=settings.search_url,
        username=settings.search_username,
        password=settings.search_password,
        api_key=settings.search_api_key,
        dry_run=settings.search_dry_run,
    )
    push = PushClient(
        url=settings.fcm_url,
        server_key=settings.fcm_server_key,
        dry_run=settings.push_dry_run,
    )
    logger.info(
        f"Service context built - search dry-run: {search.dry_run}, push dry-run: {push.dry_run}"
    )
    return ServiceContext(settings=settings, search=search, push=push)


def get_context(request: Request) -> ServiceContext:
    """FastAPI dependency: the context built at startup."""
    return request.app.state.context
