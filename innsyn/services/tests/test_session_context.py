"""
Tests for session initialization and identity gates.
"""

import dataclasses

import pytest
from unittest.mock import AsyncMock, patch

from innsyn.exceptions import NotApprovedError, NotAuthenticatedError, StoreError
from innsyn.services.identity_service import AuthenticatedUser, StaticIdentityProvider
from innsyn.services.session_context import SessionContext, SessionTokenStore


@pytest.fixture
def token_store(tmp_path):
    return SessionTokenStore(state_dir=tmp_path / "state", key="nj_session_id")


class TestSessionTokenStore:
    """Test the persisted session token"""

    def test_created_once_and_reused(self, token_store):
        first = token_store.load_or_create()
        second = token_store.load_or_create()

        assert first == second
        assert token_store.path.read_text(encoding="utf-8") == first

    def test_different_directories_get_different_tokens(self, tmp_path):
        a = SessionTokenStore(state_dir=tmp_path / "a").load_or_create()
        b = SessionTokenStore(state_dir=tmp_path / "b").load_or_create()
        assert a != b

    def test_unwritable_directory_still_yields_token(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = SessionTokenStore(state_dir=blocker / "state")

        assert store.load_or_create()


class TestInitialize:
    """Test building the immutable context"""

    @pytest.mark.asyncio
    async def test_approved_user(self, token_store):
        identity = StaticIdentityProvider(AuthenticatedUser(id="user-1", email="a@example.no"), approved=True)

        context = await SessionContext.initialize(identity, token_store)

        assert context.user_id == "user-1"
        assert context.email == "a@example.no"
        assert context.approved is True
        assert context.session_id == token_store.load_or_create()
        assert context.require_approved() == "user-1"

    @pytest.mark.asyncio
    async def test_no_user(self, token_store):
        context = await SessionContext.initialize(StaticIdentityProvider(None), token_store)

        assert context.is_authenticated is False
        with pytest.raises(NotAuthenticatedError):
            context.require_user()

    @pytest.mark.asyncio
    async def test_unapproved_user_denied(self, token_store):
        identity = StaticIdentityProvider(AuthenticatedUser(id="user-2"), approved=False)
        context = await SessionContext.initialize(identity, token_store)

        assert context.require_user() == "user-2"
        with patch("innsyn.services.session_context.security_audit_logger") as audit:
            with pytest.raises(NotApprovedError):
                context.require_approved()
        audit.log_access_denied.assert_called_once()

    @pytest.mark.asyncio
    async def test_approval_lookup_failure_means_not_approved(self, token_store):
        identity = StaticIdentityProvider(AuthenticatedUser(id="user-3"))
        identity.is_approved = AsyncMock(side_effect=StoreError("profiles unavailable"))

        context = await SessionContext.initialize(identity, token_store)

        assert context.user_id == "user-3"
        assert context.approved is False

    def test_context_is_immutable(self, session):
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.user_id = "someone-else"
