"""
Tests for disclosure request models.
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from innsyn.models.request_models import (
    DisclosureRequest,
    DisclosureRequestCreate,
    RequestOutcome,
    RequestType,
    request_key,
    source_label,
    type_label,
)


class TestDisclosureRequest:
    """Test the stored request model"""

    @pytest.mark.parametrize("status,answered", [
        ("draft", False),
        ("queued", False),
        ("sent", False),
        ("answered", True),
        ("rejected", True),
        ("closed", True),
    ])
    def test_is_answered(self, status, answered):
        request = DisclosureRequest(id="r", user_id="u", status=status)
        assert request.is_answered is answered
        assert request.status_label == ("Besvart" if answered else "Ikke besvart")

    def test_can_dispatch_only_before_sending(self):
        assert DisclosureRequest(id="r", user_id="u", status="draft").can_dispatch
        assert DisclosureRequest(id="r", user_id="u", status="queued").can_dispatch
        assert not DisclosureRequest(id="r", user_id="u", status="sent").can_dispatch

    def test_uuid_identifiers_coerced(self):
        request_id = uuid4()
        request = DisclosureRequest(id=request_id, user_id=uuid4())
        assert request.id == str(request_id)

    def test_labels(self):
        request = DisclosureRequest(id="r", user_id="u", type="job_applicants", outcome="story")
        assert request.type_label == "Søkerliste – stilling"
        assert request.outcome_label == "Resulterte i sak"
        assert DisclosureRequest(id="r", user_id="u", outcome=None).outcome_label == "– ikke satt –"

    def test_label_fallbacks(self):
        assert type_label(None) == "Ukjent"
        assert type_label("other") == "other"
        assert source_label("webcruiter") == "Webcruiter"
        assert source_label(None) == "—"

    def test_source_key(self):
        request = DisclosureRequest.model_validate({"id": "r", "user_id": "u", "source": "entries", "source_entry_id": 42})
        assert request.source_key == "entries:42"
        assert request_key("entries", None) is None


class TestDisclosureRequestCreate:
    """Test the insert payload"""

    def test_to_row_uses_store_columns(self):
        draft = DisclosureRequestCreate(
            user_id="u",
            source="entries",
            source_entry_id=42,
            authority="Levanger kommune",
            recipient_email="",
            subject="Innsyn i dokument",
            body="Hei,",
        )

        row = draft.to_row()

        assert row["etat"] == "Levanger kommune"
        assert row["type"] == RequestType.POSTJOURNAL.value
        assert row["status"] == "draft"
        assert row["outcome"] == RequestOutcome.UNKNOWN.value
        assert row["sent_at"] is None
        assert row["recipient_email"] is None

    def test_empty_subject_rejected(self):
        with pytest.raises(ValidationError):
            DisclosureRequestCreate(user_id="u", source="entries", source_entry_id=1, subject=" ", body="Hei")
