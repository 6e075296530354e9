"""
Exception hierarchy for the innsyn service.

Messages are user-facing (Norwegian) where the error is shown to the user
as-is; the underlying store or function message is kept on ``detail``.
"""

from typing import Optional


class InnsynError(Exception):
    """Base class for all innsyn errors"""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class StoreError(InnsynError):
    """The record store was unreachable or rejected a query or write"""


class NotAuthenticatedError(InnsynError):
    """No signed-in user"""

    def __init__(self, message: str = "Du må være innlogget for å bruke innsynslisten."):
        super().__init__(message)


class NotApprovedError(InnsynError):
    """The signed-in user has not been approved yet"""

    def __init__(self, message: str = "Brukeren er ikke godkjent ennå."):
        super().__init__(message)


class InvalidEntryError(InnsynError):
    """The entry lacks a usable identifier"""


class DuplicateRequestError(InnsynError):
    """A request for this entry already exists for the user"""

    def __init__(self, message: str = "Posten ligger allerede i innsynslisten."):
        super().__init__(message)


class RequestWriteError(InnsynError):
    """Creating a request failed"""

    def __init__(self, message: str = "Klarte ikke å legge til i innsynslisten.", detail: Optional[str] = None):
        super().__init__(message, detail)


class OutcomeUpdateError(InnsynError):
    """Updating the outcome of a request failed"""

    def __init__(self, message: str = "Klarte ikke å oppdatere resultat.", detail: Optional[str] = None):
        super().__init__(message, detail)


class MissingRecipientError(InnsynError):
    """Dispatch attempted without a recipient email"""

    def __init__(self, message: str = "Mangler e-postadresse til mottaker."):
        super().__init__(message)


class ConfirmationRequiredError(InnsynError):
    """Dispatch attempted without explicit user confirmation"""

    def __init__(self, message: str = "Send dette innsynskravet nå?"):
        super().__init__(message)


class DispatchError(InnsynError):
    """The dispatch function failed or rejected the request"""

    def __init__(self, detail: Optional[str] = None):
        message = "Klarte ikke å sende innsynet."
        if detail:
            message = f"{message}\n\n{detail}"
        super().__init__(message, detail)


class RequestNotDispatchableError(InnsynError):
    """Dispatch attempted for a request that has already been sent"""

    def __init__(self, status: Optional[str] = None):
        super().__init__("Innsynskravet er allerede sendt.", detail=status)
