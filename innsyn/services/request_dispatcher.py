"""
Adapter for the server-side function that sends a disclosure request.

The function takes the request id, emails the stored subject and body to
the stored recipient and marks the row ``sent``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from supabase import AsyncClient

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of one dispatch call"""
    ok: bool
    error: Optional[str] = None


def parse_dispatch_response(payload: Any) -> DispatchResult:
    """
    Interpret the function's JSON response.

    ``{"ok": true}`` is success. ``{"ok": false, "error": "..."}`` or any
    payload carrying an error is a failure.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            payload = json.loads(payload) if payload.strip() else {}
        except ValueError:
            return DispatchResult(ok=False, error=payload)

    if not isinstance(payload, dict):
        return DispatchResult(ok=False, error="Uventet svar fra utsendingstjenesten")

    error = payload.get("error")
    if error:
        return DispatchResult(ok=False, error=str(error))
    if not payload.get("ok"):
        return DispatchResult(ok=False, error=None)
    return DispatchResult(ok=True)


class RequestDispatcher:
    """Interface for sending a stored request by id"""

    async def dispatch(self, request_id: str) -> DispatchResult:
        raise NotImplementedError


class SupabaseFunctionDispatcher(RequestDispatcher):
    """Invokes the ``send_innsyn_request`` edge function"""

    def __init__(self, client: AsyncClient, function_name: Optional[str] = None):
        self.client = client
        self.function_name = function_name or settings.supabase.dispatch_function

    async def dispatch(self, request_id: str) -> DispatchResult:
        """
        Invoke the dispatch function for one request.

        Transport failures are returned as a failed result rather than
        raised, carrying the underlying message.
        """
        try:
            payload = await self.client.functions.invoke(
                self.function_name,
                invoke_options={"body": {"id": request_id}, "responseType": "json"},
            )
        except Exception as e:
            logger.error(f"Dispatch function {self.function_name} failed for {request_id}: {e}")
            message = getattr(e, "message", None) or str(e)
            return DispatchResult(ok=False, error=message)

        result = parse_dispatch_response(payload)
        if not result.ok:
            logger.warning(f"Dispatch of {request_id} rejected: {result.error}")
        return result
