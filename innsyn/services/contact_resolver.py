"""
Maps an authority name to the address disclosure requests should be sent to.
"""

import logging
from typing import Dict, Mapping, Optional

from config.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_CONTACTS: Dict[str, str] = {
    "Levanger kommune": "postmottak@levanger.kommune.no",
    "Verdal kommune": "postmottak@verdal.kommune.no",
    "Trøndelag fylkeskommune": "postmottak@trondelagfylke.no",
    "Statsforvalteren i Trøndelag": "sftl.post@statsforvalteren.no",
    "Helse Nord-Trøndelag HF": "postmottak@hnt.no",
    "Helse Midt-Norge RHF": "hmn.postmottak@helse-midt.no",
}


class ContactResolver:
    """
    Resolves recipient emails from a fixed, ordered authority table.

    Exact key match wins. Otherwise the first key (in table order) that the
    authority name contains, compared case-insensitively, is used. No match
    returns an empty string, meaning the address must be filled in by hand.
    """

    def __init__(self, contacts: Optional[Mapping[str, str]] = None):
        if contacts is None:
            contacts = {**DEFAULT_CONTACTS, **settings.innsyn.extra_contacts}
        self._contacts: Dict[str, str] = dict(contacts)
        self._lowered = [(key.lower(), email) for key, email in self._contacts.items()]

    @property
    def contacts(self) -> Dict[str, str]:
        return dict(self._contacts)

    def resolve(self, authority: Optional[str]) -> str:
        """
        Look up the recipient email for an authority.

        Args:
            authority: Authority name as written in the journal (may be empty)

        Returns:
            Email address, or "" when nothing matches
        """
        name = (authority or "").strip()
        if not name:
            return ""

        if name in self._contacts:
            return self._contacts[name]

        lower = name.lower()
        for key, email in self._lowered:
            if key in lower:
                return email

        logger.debug(f"No contact address for authority '{name}'")
        return ""
