"""
Tests for the Entry Browser.
"""

import pytest

from innsyn.database.record_store import ENTRIES_TABLE
from innsyn.services.entry_browser import EntryBrowser, EntryPage


@pytest.fixture
def browse_store(fake_store):
    fake_store.tables[ENTRIES_TABLE] = [
        {"id": 1, "etat": "Levanger kommune", "innhold": "Byggesak Moan", "saksnr": "2024/1-1",
         "jdato": "2024-01-10", "hentet_tid": "2024-01-11T06:00:00", "kind": "journalpost", "source_type": "einnsyn"},
        {"id": 2, "etat": "Verdal kommune", "innhold": "Skolebruksplan", "saksnr": "2024/2-1",
         "jdato": "2024-01-12", "hentet_tid": "2024-01-13T06:00:00", "kind": "journalpost", "source_type": "acos"},
        {"id": 3, "etat": "Levanger kommune", "innhold": "Saksmappe byggesak", "saksnr": "2024/1",
         "jdato": "2024-01-09", "hentet_tid": "2024-01-11T06:00:00", "kind": "saksmappe", "source_type": "einnsyn"},
        {"id": 4, "etat": "Levanger kommune", "innhold": "Udatert notat", "saksnr": "2024/4-1",
         "jdato": None, "hentet_tid": "2024-01-14T06:00:00", "kind": "journalpost", "source_type": "einnsyn",
         "sak_tittel": "Reguleringsplan Moan"},
    ]
    return fake_store


class TestSearch:
    """Test searching and paging"""

    @pytest.mark.asyncio
    async def test_excludes_case_folders_and_orders_by_date(self, browse_store):
        page = await EntryBrowser(browse_store).search()

        assert [e.id for e in page.entries] == [2, 1, 4]
        assert page.total == 3

    @pytest.mark.asyncio
    async def test_term_matches_any_search_column(self, browse_store):
        page = await EntryBrowser(browse_store).search("  moan ")

        assert [e.id for e in page.entries] == [1, 4]
        assert browse_store.selects[0].search.term == "moan"

    @pytest.mark.asyncio
    async def test_blank_term_not_applied(self, browse_store):
        await EntryBrowser(browse_store).search("   ")
        assert browse_store.selects[0].search is None

    @pytest.mark.asyncio
    async def test_source_type_filter(self, browse_store):
        page = await EntryBrowser(browse_store).search(source_type="acos")
        assert [e.id for e in page.entries] == [2]

    @pytest.mark.asyncio
    async def test_paging(self, browse_store):
        browser = EntryBrowser(browse_store)

        first = await browser.search(page=0, limit=2)
        second = await browser.search(page=1, limit=2)

        assert (first.first, first.last, first.has_previous, first.has_next) == (1, 2, False, True)
        assert (second.first, second.last, second.has_previous, second.has_next) == (3, 3, True, False)
        assert [e.id for e in second.entries] == [4]

    @pytest.mark.asyncio
    async def test_failure_returns_empty_page(self, browse_store):
        browse_store.fail("select", ENTRIES_TABLE, "statement timeout")

        page = await EntryBrowser(browse_store).search("moan")

        assert page.entries == []
        assert page.total == 0
        assert page.error_message == "statement timeout"

    @pytest.mark.asyncio
    async def test_get_by_id(self, browse_store):
        browser = EntryBrowser(browse_store)

        entry = await browser.get(2)

        assert entry.authority == "Verdal kommune"
        assert await browser.get(99) is None


class TestEntryPage:
    """Test page bounds"""

    def test_empty_page(self):
        page = EntryPage()
        assert (page.first, page.last, page.has_previous, page.has_next) == (0, 0, False, False)
