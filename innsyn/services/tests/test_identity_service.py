"""
Tests for the identity providers.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from innsyn.database.record_store import PROFILES_TABLE
from innsyn.exceptions import StoreError
from innsyn.services.identity_service import (
    AuthenticatedUser,
    StaticIdentityProvider,
    SupabaseIdentityProvider,
)


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for testing"""
    client = MagicMock()
    client.auth.get_user = AsyncMock()
    client.auth.sign_in_with_password = AsyncMock()
    return client


def auth_response(user_id="user-1", email="a@example.no"):
    response = MagicMock()
    response.user.id = user_id
    response.user.email = email
    return response


class TestSupabaseIdentityProvider:
    """Test Supabase auth integration"""

    @pytest.mark.asyncio
    async def test_current_user(self, mock_supabase_client, fake_store):
        mock_supabase_client.auth.get_user.return_value = auth_response()
        provider = SupabaseIdentityProvider(mock_supabase_client, fake_store)

        user = await provider.get_current_user()

        assert user == AuthenticatedUser(id="user-1", email="a@example.no")

    @pytest.mark.asyncio
    async def test_no_session(self, mock_supabase_client, fake_store):
        mock_supabase_client.auth.get_user.side_effect = Exception("Auth session missing!")
        provider = SupabaseIdentityProvider(mock_supabase_client, fake_store)

        assert await provider.get_current_user() is None

    @pytest.mark.asyncio
    async def test_sign_in(self, mock_supabase_client, fake_store):
        mock_supabase_client.auth.sign_in_with_password.return_value = auth_response("user-9")
        provider = SupabaseIdentityProvider(mock_supabase_client, fake_store)

        user = await provider.sign_in("a@example.no", "hemmelig")

        assert user.id == "user-9"
        mock_supabase_client.auth.sign_in_with_password.assert_awaited_once_with(
            {"email": "a@example.no", "password": "hemmelig"}
        )

    @pytest.mark.asyncio
    async def test_sign_in_rejected(self, mock_supabase_client, fake_store):
        mock_supabase_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        provider = SupabaseIdentityProvider(mock_supabase_client, fake_store)

        with pytest.raises(StoreError) as exc_info:
            await provider.sign_in("a@example.no", "feil")

        assert exc_info.value.detail == "Invalid login credentials"

    @pytest.mark.asyncio
    async def test_approval_from_profiles(self, mock_supabase_client, fake_store):
        fake_store.tables[PROFILES_TABLE] = [
            {"id": "user-1", "approved": True},
            {"id": "user-2", "approved": False},
        ]
        provider = SupabaseIdentityProvider(mock_supabase_client, fake_store)

        assert await provider.is_approved("user-1") is True
        assert await provider.is_approved("user-2") is False
        assert await provider.is_approved("missing") is False


class TestStaticIdentityProvider:
    """Test the fixed identity provider"""

    @pytest.mark.asyncio
    async def test_explicit_approval(self):
        provider = StaticIdentityProvider(AuthenticatedUser(id="u"), approved=True)
        assert await provider.is_approved("u") is True

    @pytest.mark.asyncio
    async def test_approval_from_store(self, fake_store):
        fake_store.tables[PROFILES_TABLE] = [{"id": "u", "approved": True}]
        provider = StaticIdentityProvider(AuthenticatedUser(id="u"), store=fake_store)
        assert await provider.is_approved("u") is True

    @pytest.mark.asyncio
    async def test_no_store_means_not_approved(self):
        provider = StaticIdentityProvider(AuthenticatedUser(id="u"))
        assert await provider.is_approved("u") is False
