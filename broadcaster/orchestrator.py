"""
Broadcast Orchestrator

Single entry point for user-intended operations.  Gates every request on
user confirmation, the private-key safety scan, and signing credentials
before handing it to the executor.

Flow:
  1. Decide the authority level the operation needs.
  2. Confirmation gate: park the request and return.
  3. Safety gate: an embedded private key re-prompts with a warning.
  4. Credentials: resolve a signing key, or ask the user to log in.
  5. Execute, then record an analytics event.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from broadcaster.executor import BroadcastExecutor
from broadcaster.models import BroadcastPayload, BroadcastRequest
from broadcaster.operations import analytics_event_name, analytics_page, needs_active_auth
from broadcaster.safety import has_private_keys
from broadcaster.state import ConfirmOperation, ShowLogin, StateStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Prompt copy
# ---------------------------------------------------------------------------

POST_KEY_WARNING_CONFIRM = "Are you sure you want to post a private key?"
POST_KEY_WARNING_TEXT = (
    "This transaction appears to contain a private key. "
    "Anything posted to the blockchain is public and permanent."
)
POST_KEY_WARNING_CHECKBOX = "I understand the key will be public"


class CredentialResolver(Protocol):
    async def resolve_signing_key(
        self,
        op_type: str,
        needs_active_auth: bool,
        username: Optional[str],
        password: Optional[str],
    ) -> Optional[str]: ...


class AnalyticsRecorder(Protocol):
    async def record_event(self, event_name: str, page: str = "") -> None: ...


class Orchestrator:
    """
    Drives one BroadcastRequest through the gates and into the executor.

    ``submit`` never returns a value.  Outcomes reach the caller through the
    request's callbacks or through commands dispatched to the store
    (ConfirmOperation, ShowLogin) that expect the request to be resubmitted.
    """

    def __init__(
        self,
        store: StateStore,
        executor: BroadcastExecutor,
        credentials: CredentialResolver,
        analytics: Optional[AnalyticsRecorder] = None,
    ):
        self.store = store
        self.executor = executor
        self.credentials = credentials
        self.analytics = analytics

    async def submit(self, request: BroadcastRequest) -> None:
        needs_active = needs_active_auth(request.type, request.operation)

        # --- Confirmation gate ---
        if request.confirm_required():
            logger.info("%s awaiting user confirmation", request.type)
            await self.store.dispatch(ConfirmOperation(
                confirm=request.confirm,
                warning=request.warning,
                operation=request.model_copy(update={"confirm": None}),
                error_callback=request.error_callback,
            ))
            return

        payload = BroadcastPayload(
            operations=[[request.type, dict(request.operation)]],
            needs_active_auth=needs_active,
            keys=list(request.keys),
            username=request.username,
            success_callback=request.success_callback,
            error_callback=request.error_callback,
            use_external_signer=request.use_external_signer,
        )

        # --- Safety gate ---
        if not request.allow_unsafe_post and has_private_keys(payload.operations):
            logger.warning("%s appears to contain a private key", request.type)
            await self.store.dispatch(ConfirmOperation(
                confirm=POST_KEY_WARNING_CONFIRM,
                warning=POST_KEY_WARNING_TEXT,
                checkbox=POST_KEY_WARNING_CHECKBOX,
                operation=request.model_copy(
                    update={"confirm": None, "allow_unsafe_post": True}
                ),
                error_callback=request.error_callback,
            ))
            return

        try:
            # --- Credentials ---
            if not await self.executor.uses_external_signer(payload) and not payload.keys:
                signing_key = await self.credentials.resolve_signing_key(
                    request.type, needs_active, request.username, request.password,
                )
                if signing_key:
                    payload.keys.append(signing_key)
                elif not request.password:
                    logger.info("%s needs a login before it can be signed", request.type)
                    await self.store.dispatch(ShowLogin(
                        operation=request.model_copy(update={"confirm": None}),
                        save_login=True,
                    ))
                    return

            # --- Execute ---
            await self.executor.execute(payload)

        except Exception as error:
            logger.error("%s submission failed: %s", request.type, error)
            if request.error_callback is not None:
                request.error_callback(str(error))
            return

        await self._record_analytics(request)

    async def _record_analytics(self, request: BroadcastRequest) -> None:
        if self.analytics is None:
            return
        event_name = analytics_event_name(request.type, request.operation)
        try:
            await self.analytics.record_event(
                event_name, analytics_page(event_name, request.operation)
            )
        except Exception as error:
            logger.warning("analytics event %s not recorded: %s", event_name, error)
