"""
Request Lifecycle Manager: the user's disclosure request basket.

Creates draft requests from entries, lists them, dispatches them through
the dispatch function and records the user's outcome annotation.

Status moves draft -> queued -> sent -> answered | rejected | closed and
is only changed by the dispatch function and downstream processes. The
outcome is independent of status and may be set at any time.
"""

import logging
from typing import Dict, List, Optional, Set

from config.settings import settings
from innsyn.database.record_store import REQUEST_COLUMNS, REQUESTS_TABLE, RecordStore, StoreQuery
from innsyn.exceptions import (
    ConfirmationRequiredError,
    DispatchError,
    DuplicateRequestError,
    InvalidEntryError,
    MissingRecipientError,
    OutcomeUpdateError,
    RequestNotDispatchableError,
    RequestWriteError,
    StoreError,
)
from innsyn.models.entry_models import Entry
from innsyn.models.request_models import (
    DisclosureRequest,
    DisclosureRequestCreate,
    RequestOutcome,
    RequestType,
)
from innsyn.services.contact_resolver import ContactResolver
from innsyn.services.event_logger import EventLogger
from innsyn.services.request_deduplicator import RequestDeduplicator
from innsyn.services.request_dispatcher import RequestDispatcher
from innsyn.services.request_templates import build_body, build_subject
from innsyn.services.session_context import SessionContext
from innsyn.utils.audit_logger import request_audit_logger
from innsyn.utils.dates import timestamp_or_epoch

logger = logging.getLogger(__name__)

SORT_NEWEST = "nyeste"
SORT_OLDEST = "eldste"


class RequestLifecycleManager:
    """Owns the current user's list of disclosure requests"""

    def __init__(
        self,
        store: RecordStore,
        session: SessionContext,
        dispatcher: RequestDispatcher,
        deduplicator: Optional[RequestDeduplicator] = None,
        contacts: Optional[ContactResolver] = None,
        event_logger: Optional[EventLogger] = None,
        request_type: Optional[str] = None,
    ):
        """
        Initialize the manager.

        Args:
            store: Record store holding ``innsyn_requests``
            session: Session of the acting user
            dispatcher: Sends requests by id
            deduplicator: Membership set updated on creation
            contacts: Recipient lookup used when drafting
            event_logger: Receives ``add_innsyn`` events
            request_type: Type of requests created by ``add_to_basket``
        """
        self.store = store
        self.session = session
        self.dispatcher = dispatcher
        self.request_type = RequestType(request_type or settings.innsyn.default_request_type)
        self.deduplicator = deduplicator or RequestDeduplicator(
            store, session, request_type=self.request_type.value
        )
        self.contacts = contacts or ContactResolver()
        self.event_logger = event_logger

        self.requests: List[DisclosureRequest] = []
        self.error_message: Optional[str] = None

        self._dispatching: Set[str] = set()
        self._saving: Set[str] = set()
        self._previous_outcomes: Dict[str, Optional[str]] = {}

    @property
    def source(self) -> str:
        return self.deduplicator.source

    def get(self, request_id: str) -> Optional[DisclosureRequest]:
        for request in self.requests:
            if request.id == request_id:
                return request
        return None

    def is_dispatching(self, request_id: str) -> bool:
        return request_id in self._dispatching

    def is_saving(self, request_id: str) -> bool:
        return request_id in self._saving

    async def add_to_basket(self, entry: Entry) -> DisclosureRequest:
        """
        Create a draft request for an entry.

        Args:
            entry: Entry to request access to

        Returns:
            The stored request

        Raises:
            NotAuthenticatedError: No signed-in user
            InvalidEntryError: Entry has no usable numeric id
            DuplicateRequestError: The entry is already in the basket
            RequestWriteError: The store rejected the insert
        """
        user_id = self.session.require_user()

        if entry.id is None or str(entry.id).strip() == "":
            raise InvalidEntryError("Fant ikke ID på posten.")
        try:
            entry_id = int(str(entry.id).strip())
        except ValueError:
            raise InvalidEntryError("Ugyldig ID på posten.", detail=str(entry.id))

        if self.deduplicator.is_requested(entry):
            raise DuplicateRequestError()

        recipient = self.contacts.resolve(entry.authority)
        draft = DisclosureRequestCreate(
            user_id=user_id,
            type=self.request_type,
            source=self.source,
            source_entry_id=entry_id,
            authority=entry.authority,
            recipient_email=recipient or None,
            subject=build_subject(entry, self.request_type.value),
            body=build_body(entry),
        )

        try:
            row = await self.store.insert(REQUESTS_TABLE, draft.to_row())
        except StoreError as e:
            logger.error(f"Failed to add entry {entry_id} to basket for {user_id}: {e.message}")
            request_audit_logger.log_error("add_to_basket", e.message, user_id=user_id)
            raise RequestWriteError(detail=e.message) from e

        request = DisclosureRequest.model_validate(row)
        self.deduplicator.mark_requested(self.source, entry_id)
        self.requests.insert(0, request)

        request_audit_logger.log_request_created(
            request_id=request.id,
            user_id=user_id,
            request_type=self.request_type.value,
            source=self.source,
            source_entry_id=entry_id,
            authority=entry.authority,
            recipient_resolved=bool(recipient),
        )
        if self.event_logger is not None:
            await self.event_logger.log_add_request(entry, request_id=request.id)

        logger.info(f"Added entry {entry_id} to basket as request {request.id}")
        return request

    async def reload(self) -> List[DisclosureRequest]:
        """
        Replace the local list with the user's stored requests, newest first.

        Query failures leave an empty list and set ``error_message``.
        """
        if not self.session.user_id:
            self.requests = []
            return self.requests

        query = (
            StoreQuery(table=REQUESTS_TABLE, columns=REQUEST_COLUMNS)
            .where("user_id", self.session.user_id)
            .order_by("created_at", ascending=False)
        )
        try:
            result = await self.store.select(query)
        except StoreError as e:
            logger.error(f"Failed to load requests for {self.session.user_id}: {e.message}")
            self.requests = []
            self.error_message = e.message
            return self.requests

        self.requests = [DisclosureRequest.model_validate(row) for row in result.rows]
        self.error_message = None
        return self.requests

    def sorted_requests(self, mode: str = SORT_NEWEST) -> List[DisclosureRequest]:
        """Local list sorted by creation time ("nyeste" or "eldste")."""
        if mode not in (SORT_NEWEST, SORT_OLDEST):
            raise ValueError(f"Unknown sort mode: {mode}")
        return sorted(
            self.requests,
            key=lambda request: timestamp_or_epoch(request.created_at),
            reverse=(mode == SORT_NEWEST),
        )

    async def dispatch(
        self, request: DisclosureRequest, confirmed: bool = False
    ) -> Optional[DisclosureRequest]:
        """
        Send a request through the dispatch function.

        Args:
            request: Request to send
            confirmed: Whether the user confirmed sending

        Returns:
            The reloaded request, or None when a dispatch for the same
            request is already in flight or the reload after sending
            failed (see ``error_message``)

        Raises:
            MissingRecipientError: No recipient email on the request
            ConfirmationRequiredError: ``confirmed`` is False
            RequestNotDispatchableError: The request is past draft/queued
            DispatchError: The function failed or rejected the request
        """
        user_id = self.session.require_user()

        if not (request.recipient_email or "").strip():
            raise MissingRecipientError()
        if not confirmed:
            raise ConfirmationRequiredError()
        if not request.can_dispatch:
            raise RequestNotDispatchableError(request.status)
        if request.id in self._dispatching:
            logger.debug(f"Dispatch of {request.id} already in flight, ignoring")
            return None

        self._dispatching.add(request.id)
        try:
            result = await self.dispatcher.dispatch(request.id)
            if not result.ok:
                request_audit_logger.log_dispatch_failed(request.id, user_id, result.error or "")
                raise DispatchError(result.error)

            await self.reload()
            updated = self.get(request.id)
            request_audit_logger.log_request_dispatched(
                request.id, user_id, status=updated.status if updated else None
            )
            logger.info(f"Dispatched request {request.id}")
            if updated is None:
                logger.warning(f"Request {request.id} sent but could not be reloaded: {self.error_message}")
            return updated
        finally:
            self._dispatching.discard(request.id)

    def apply_optimistic_outcome(self, request_id: str, outcome: str) -> bool:
        """
        Show ``outcome`` locally before the store confirms it.

        Returns:
            True if the request is in the local list
        """
        for index, request in enumerate(self.requests):
            if request.id == request_id:
                self._previous_outcomes[request_id] = request.outcome
                self.requests[index] = request.model_copy(update={"outcome": outcome})
                return True
        return False

    def revert_outcome(self, request_id: str) -> None:
        """Undo the last optimistic outcome for a request."""
        if request_id not in self._previous_outcomes:
            return
        previous = self._previous_outcomes.pop(request_id)
        for index, request in enumerate(self.requests):
            if request.id == request_id:
                self.requests[index] = request.model_copy(update={"outcome": previous})
                return

    async def set_outcome(
        self, request: DisclosureRequest, outcome: str
    ) -> Optional[DisclosureRequest]:
        """
        Record how a request was resolved.

        Applied locally first, then written, then reconciled with a reload.
        On failure the local value is reverted.

        Args:
            request: Request to annotate
            outcome: One of unknown, full, denied, story

        Returns:
            The reloaded request, or None if a save for it is already running

        Raises:
            ValueError: Unknown outcome value
            OutcomeUpdateError: The store rejected the update
        """
        value = RequestOutcome(outcome).value
        user_id = self.session.require_user()

        if request.id in self._saving:
            logger.debug(f"Outcome save for {request.id} already running, ignoring")
            return None

        self._saving.add(request.id)
        try:
            self.apply_optimistic_outcome(request.id, value)
            try:
                rows = await self.store.update(
                    REQUESTS_TABLE, {"outcome": value}, {"id": request.id, "user_id": user_id}
                )
            except StoreError as e:
                self.revert_outcome(request.id)
                logger.error(f"Failed to update outcome of {request.id}: {e.message}")
                raise OutcomeUpdateError(detail=e.message) from e

            if not rows:
                self.revert_outcome(request.id)
                logger.error(f"Outcome update of {request.id} matched no rows")
                raise OutcomeUpdateError(detail=request.id)

            self._previous_outcomes.pop(request.id, None)
            request_audit_logger.log_outcome_updated(
                request.id, user_id, request.outcome, value, status=request.status
            )

            await self.reload()
            return self.get(request.id) or request.model_copy(update={"outcome": value})
        finally:
            self._saving.discard(request.id)
