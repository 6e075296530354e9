"""
Identity provider backed by Supabase auth and the ``profiles`` table.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from supabase import AsyncClient

from innsyn.database.record_store import PROFILES_TABLE, RecordStore, StoreQuery
from innsyn.exceptions import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Signed-in user as reported by the identity provider"""
    id: str
    email: Optional[str] = None


async def profile_approved(store: RecordStore, user_id: str) -> bool:
    """Approval flag from ``profiles``; a missing profile counts as not approved."""
    query = StoreQuery(table=PROFILES_TABLE, columns="approved").where("id", user_id)
    result = await store.select(query)
    if not result.rows:
        return False
    return bool(result.rows[0].get("approved"))


class IdentityProvider:
    """Interface: resolves the current user and their approval flag."""

    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        raise NotImplementedError

    async def is_approved(self, user_id: str) -> bool:
        raise NotImplementedError


class SupabaseIdentityProvider(IdentityProvider):
    """Reads the auth session from the Supabase client and approval from profiles"""

    def __init__(self, client: AsyncClient, store: RecordStore):
        self.client = client
        self.store = store

    async def sign_in(self, email: str, password: str) -> AuthenticatedUser:
        """
        Sign in with email and password.

        Raises:
            StoreError: If the identity provider rejects the credentials
        """
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise StoreError("Innlogging feilet", detail=str(e)) from e

        if response is None or response.user is None:
            raise StoreError("Innlogging feilet")
        return AuthenticatedUser(id=str(response.user.id), email=response.user.email)

    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        try:
            response = await self.client.auth.get_user()
        except Exception as e:
            # No session is an expected state, not an error
            logger.info(f"No authenticated session: {e}")
            return None

        if response is None or response.user is None:
            return None
        return AuthenticatedUser(id=str(response.user.id), email=response.user.email)

    async def is_approved(self, user_id: str) -> bool:
        return await profile_approved(self.store, user_id)


class StaticIdentityProvider(IdentityProvider):
    """Fixed identity, for the SQL backend and scripted use"""

    def __init__(self, user: Optional[AuthenticatedUser], store: Optional[RecordStore] = None, approved: Optional[bool] = None):
        self.user = user
        self.store = store
        self.approved = approved

    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        return self.user

    async def is_approved(self, user_id: str) -> bool:
        if self.approved is not None:
            return self.approved
        if self.store is None:
            return False
        return await profile_approved(self.store, user_id)
