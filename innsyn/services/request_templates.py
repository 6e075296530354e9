"""
Text templates for disclosure requests.

The formal request body cites offentleglova § 3 and asks for the legal
basis on refusal (§§ 31–32). The short mailto variant is used by the
recommendation feed's contact action.
"""

from typing import Optional
from urllib.parse import quote

from innsyn.models.entry_models import Entry
from innsyn.models.request_models import RequestType
from innsyn.utils.dates import format_date_human

MISSING = "—"

REQUEST_LABELS = {
    RequestType.POSTJOURNAL.value: "Innsyn i dokument",
    RequestType.JOB_APPLICANTS.value: "Innsyn i søkerliste",
    RequestType.JOB_HIRED.value: "Innsyn i ansettelsesvedtak",
}


def _value(text: Optional[str]) -> str:
    if text is None:
        return MISSING
    text = str(text).strip()
    return text or MISSING


def build_subject(entry: Entry, request_type: str = RequestType.POSTJOURNAL.value) -> str:
    """
    Subject line for a formal request.

    Example: ``Innsyn i dokument – sak 2024/100-3 (Levanger kommune)``
    """
    label = REQUEST_LABELS.get(request_type, REQUEST_LABELS[RequestType.POSTJOURNAL.value])
    subject = label
    if entry.case_number:
        subject += f" – sak {entry.case_number}"
    subject += f" ({entry.authority or 'virksomheten'})"
    return subject


def build_body(entry: Entry) -> str:
    """Formal request body for one entry."""
    lines = [
        "Hei,",
        "",
        "Jeg ber med dette om innsyn i dokument i henhold til offentleglova § 3.",
        "",
        "Opplysninger:",
        f"• Virksomhet: {_value(entry.authority)}",
        f"• Saksnummer: {_value(entry.case_number)}",
        f"• Tittel: {_value(entry.title)}",
        f"• Journaldato: {format_date_human(entry.journal_date, MISSING)}",
        f"• Dokumentdato: {format_date_human(entry.document_date, MISSING)}",
        f"• Kilde: {_value(entry.source_url)}",
        "",
        "Jeg ber om at dokumentet oversendes elektronisk (PDF).",
        "Ved helt eller delvis avslag ber jeg om hjemmelhenvisning, konkret begrunnelse "
        "og opplysning om klagerett og klagefrist, jf. offentleglova §§ 31–32.",
        "",
        "Vennlig hilsen",
        "[Navn]",
        "[Tlf]",
    ]
    return "\n".join(lines)


def build_mailto_body(entry: Entry) -> str:
    """Short body used in mailto links"""
    lines = [
        "Hei,",
        "",
        "Jeg ber med dette om innsyn i dokumentet.",
        f"Tittel: {entry.title or ''}",
        f"Saksnummer: {entry.case_number or ''}",
        f"Avsender/mottaker: {entry.sender_recipient or ''}",
        "",
        "Kravet fremsettes etter offentleglova. Jeg ber om elektronisk innsyn.",
        "",
        "Med vennlig hilsen,",
    ]
    return "\n".join(lines)


def build_mailto(entry: Entry, email: str) -> str:
    """
    Build a ``mailto:`` link addressed to the resolved contact.

    Args:
        entry: Entry the request concerns
        email: Recipient address (may be empty; the mail client then asks)

    Returns:
        mailto URL with URL-encoded subject and body
    """
    subject = "Innsyn i dokument"
    if entry.case_number:
        subject += f" – {entry.case_number}"
    return (
        f"mailto:{email}"
        f"?subject={quote(subject, safe='')}"
        f"&body={quote(build_mailto_body(entry), safe='')}"
    )
