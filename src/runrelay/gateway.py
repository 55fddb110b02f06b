from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Caller-facing conversation gateway.

This is the surface an HTTP layer would call: start or reuse a session for a
user, post a message (which starts a remote run), and check a run until it
reaches a terminal outcome.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import GatewayConfig
from .engine import RunOutcome, RunPoller
from .errors import MissingIdentifierError, RunRelayError, SessionStoreError
from .remote.openai import OpenAIAssistantsService
from .remote.types import RemoteExecutionService
from .sessions import (
    DEFAULT_PLATFORM,
    DEFAULT_USERNAME,
    STATUS_ARRIVED,
    Session,
    SessionStore,
    create_session_store,
    now_ms,
)
from .tools.prebuilts import build_default_sources
from .tools.registry import SourceRef, ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionStart:
    session_id: str
    created: bool
    message: str


class ConversationGateway:
    def __init__(
        self,
        service: RemoteExecutionService,
        store: SessionStore,
        registry: ToolRegistry,
        *,
        assistant_id: str | None,
        poller: RunPoller | None = None,
    ) -> None:
        self.service = service
        self.store = store
        self.registry = registry
        self.assistant_id = assistant_id
        self.poller = poller or RunPoller(service)

    async def start_session(
        self,
        platform: str | None = None,
        username: str | None = None,
    ) -> SessionStart:
        """Reuse the session stored for this user, or open a new remote thread."""
        platform = platform or DEFAULT_PLATFORM
        username = username or DEFAULT_USERNAME
        logger.info("Starting conversation from platform %s for user %s", platform, username)

        existing = await self.store.get_by_identity(platform, username)
        if existing is not None:
            logger.info("Reusing session %s for user %s", existing.session_id, username)
            return SessionStart(existing.session_id, created=False, message="Using existing session")

        session_id = await self.service.create_session()
        try:
            await self.store.add(
                Session(
                    session_id=session_id,
                    platform=platform,
                    username=username,
                    status=STATUS_ARRIVED,
                    timestamp=now_ms(),
                )
            )
        except SessionStoreError:
            # a concurrent start for the same user stored its session first
            winner = await self.store.get_by_identity(platform, username)
            if winner is None:
                raise
            logger.warning(
                "Session for user %s was created concurrently; dropping thread %s",
                username,
                session_id,
            )
            return SessionStart(winner.session_id, created=False, message="Using existing session")
        logger.info("Created session %s", session_id)
        return SessionStart(session_id, created=True, message="Session created")

    async def post_message(self, session_id: str, message: str) -> str:
        """Add a user message to the session and start a run. Returns the run id."""
        if not session_id:
            logger.error("Missing session_id")
            raise MissingIdentifierError("session_id is required")
        if not self.assistant_id:
            raise RunRelayError("No assistant id configured (RUNRELAY_ASSISTANT_ID)")

        message_id = await self.service.add_user_message(session_id, message)
        logger.info("Message %s added to session %s", message_id, session_id)

        run_id = await self.service.create_run(session_id, self.assistant_id)
        logger.info("Run %s created for session %s", run_id, session_id)
        return run_id

    async def check_run(self, session_id: str, run_id: str) -> RunOutcome:
        outcome = await self.poller.advance_run(session_id, run_id, self.registry)
        if await self.store.update_status(session_id, outcome.status):
            logger.debug("Session %s status set to %s", session_id, outcome.status)
        return outcome

    async def sync_assistant_tools(self) -> int:
        """Advertise the registry's descriptors to the assistant. Returns how many were sent."""
        if not self.assistant_id:
            raise RunRelayError("No assistant id configured (RUNRELAY_ASSISTANT_ID)")
        descriptors = self.registry.descriptors
        await self.service.update_assistant_tools(self.assistant_id, descriptors)
        return len(descriptors)

    async def close(self) -> None:
        await self.store.close()


async def build_gateway(
    config: GatewayConfig | None = None,
    *,
    store: SessionStore | None = None,
    service: RemoteExecutionService | None = None,
    extra_sources: Optional[Iterable[SourceRef]] = None,
) -> ConversationGateway:
    """
    Assemble a ready gateway: built-in plus configured tool sources, the session
    store and the OpenAI service. A store the caller already set up is used as
    is. A bad tool source aborts here.
    """
    config = config or GatewayConfig.from_env()

    sources: list[SourceRef] = [*build_default_sources(config), *config.tool_sources]
    if extra_sources:
        sources.extend(extra_sources)
    registry = ToolRegistry.discover(sources)

    store = store or create_session_store(config)
    if not store.is_setup:
        await store.setup()

    return ConversationGateway(
        service=service or OpenAIAssistantsService(config),
        store=store,
        registry=registry,
        assistant_id=config.assistant_id,
    )
