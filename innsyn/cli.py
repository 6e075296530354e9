#!/usr/bin/env python3
"""
Command line front end for the innsyn service.

Browse the postjournal, look at a case, read the recommendation and job
feeds, and manage the disclosure request basket.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from config.settings import settings
from innsyn.database.record_store import RecordStore
from innsyn.exceptions import InnsynError
from innsyn.models.request_models import RequestOutcome
from innsyn.services.case_grouper import CaseGrouper
from innsyn.services.entry_browser import EntryBrowser
from innsyn.services.event_logger import DetailViewTracker, EventLogger
from innsyn.services.identity_service import (
    AuthenticatedUser,
    IdentityProvider,
    StaticIdentityProvider,
    SupabaseIdentityProvider,
)
from innsyn.services.recommendation_ranker import JobFeed, JobSortMode, RankMode, RecommendationFeed
from innsyn.services.request_deduplicator import RequestDeduplicator
from innsyn.services.request_dispatcher import RequestDispatcher, SupabaseFunctionDispatcher
from innsyn.services.request_lifecycle import SORT_NEWEST, SORT_OLDEST, RequestLifecycleManager
from innsyn.services.session_context import SessionContext
from innsyn.utils.dates import format_date_human, format_datetime_human
from innsyn.utils.logger import setup_logging

logger = logging.getLogger(__name__)

BACKEND_SUPABASE = "supabase"
BACKEND_SQL = "sql"


@dataclass
class Services:
    """Everything a command needs, wired for one backend"""
    store: RecordStore
    identity: IdentityProvider
    dispatcher: Optional[RequestDispatcher]
    close: Optional[Callable[[], Awaitable[None]]] = None


async def build_services(backend: str) -> Services:
    """Connect to the configured backend and resolve the identity provider."""
    if backend == BACKEND_SQL:
        from innsyn.database.connection import close_db, get_engine
        from innsyn.database.sql_store import SqlRecordStore

        engine = get_engine()
        store = SqlRecordStore(engine)
        user = AuthenticatedUser(id=settings.session.user_id) if settings.session.user_id else None
        return Services(
            store=store,
            identity=StaticIdentityProvider(user, store=store),
            dispatcher=None,
            close=close_db,
        )

    from innsyn.database.supabase_store import SupabaseRecordStore, create_supabase_client

    client = await create_supabase_client()
    store = SupabaseRecordStore(client)
    identity = SupabaseIdentityProvider(client, store)
    if settings.session.email and settings.session.password:
        await identity.sign_in(settings.session.email, settings.session.password)
    return Services(
        store=store,
        identity=identity,
        dispatcher=SupabaseFunctionDispatcher(client),
    )


def _print_entry_line(entry) -> None:
    date = format_date_human(entry.display_date)
    print(f"[{entry.id}] {date}  {entry.authority or '—'}  {entry.case_number or '—'}")
    print(f"      {entry.title or '—'}")


async def cmd_search(args, services: Services, session: SessionContext) -> int:
    browser = EntryBrowser(services.store)
    page = await browser.search(args.term or "", source_type=args.source_type, page=args.page)
    if page.error_message:
        print(f"Feil: {page.error_message}", file=sys.stderr)
        return 1

    print(f"Viser {page.first}–{page.last} av {page.total}")
    for entry in page.entries:
        _print_entry_line(entry)
    return 0


async def cmd_case(args, services: Services, session: SessionContext) -> int:
    browser = EntryBrowser(services.store)
    entry = await browser.get(args.entry_id)
    if entry is None:
        print(f"Fant ikke post {args.entry_id}", file=sys.stderr)
        return 1

    grouper = CaseGrouper(services.store)
    tracker = DetailViewTracker(EventLogger(services.store, session), grouper)
    await tracker.toggle(entry)

    key = grouper.key_for(entry)
    if key is None:
        print("Posten har ikke saksnummer.")
        return 0
    error = grouper.error_for(key)
    if error:
        print(f"Feil: {error}", file=sys.stderr)
        return 1

    documents = grouper.cached(key) or []
    print(f"Sak {key[1]} – {grouper.case_title(entry) or '—'} ({key[0]})")
    for document in documents:
        marker = "*" if str(document.id) == str(entry.id) else " "
        print(
            f" {marker} {format_date_human(document.journal_date)}  "
            f"dok {document.document_number or '—'}  {document.title or '—'}"
        )
    return 0


async def cmd_feed(args, services: Services, session: SessionContext) -> int:
    feed = RecommendationFeed(services.store, event_logger=EventLogger(services.store, session))
    await feed.load()
    if feed.error_message:
        print(f"Feil: {feed.error_message}", file=sys.stderr)
        return 1

    for entry in feed.ranked(args.mode):
        score = "—" if entry.score is None else f"{entry.score:.2f}"
        print(f"({score}) ", end="")
        _print_entry_line(entry)
    return 0


async def cmd_jobs(args, services: Services, session: SessionContext) -> int:
    feed = JobFeed(services.store)
    await feed.load()
    if feed.error_message:
        print(f"Feil: {feed.error_message}", file=sys.stderr)
        return 1

    for job in feed.ranked(args.mode):
        print(
            f"{format_date_human(job.published_date)}  frist {format_date_human(job.deadline_date)}  "
            f"{job.employer or '—'}: {job.title or '—'}"
        )
    return 0


def _lifecycle(services: Services, session: SessionContext) -> RequestLifecycleManager:
    return RequestLifecycleManager(
        services.store,
        session,
        dispatcher=services.dispatcher,
        deduplicator=RequestDeduplicator(services.store, session),
        event_logger=EventLogger(services.store, session),
    )


async def cmd_requests(args, services: Services, session: SessionContext) -> int:
    session.require_approved()
    manager = _lifecycle(services, session)
    await manager.reload()
    if manager.error_message:
        print(f"Feil: {manager.error_message}", file=sys.stderr)
        return 1

    for request in manager.sorted_requests(args.sort):
        print(f"{request.id}  {format_datetime_human(request.created_at)}  {request.type_label}")
        print(f"      {request.subject or '—'}")
        print(
            f"      Til: {request.recipient_email or '—'}  Status: {request.status_label} ({request.status})"
            f"  Resultat: {request.outcome_label}"
        )
        if request.can_dispatch:
            print(f"      Klar til sending: innsyn send {request.id} --yes")
        if request.sent_at:
            print(f"      Sendt: {format_datetime_human(request.sent_at)}")
    return 0


async def cmd_add(args, services: Services, session: SessionContext) -> int:
    session.require_approved()
    entry = await EntryBrowser(services.store).get(args.entry_id)
    if entry is None:
        print(f"Fant ikke post {args.entry_id}", file=sys.stderr)
        return 1

    manager = _lifecycle(services, session)
    await manager.deduplicator.reload()
    if manager.deduplicator.error_message:
        print(f"Feil: {manager.deduplicator.error_message}", file=sys.stderr)
        return 1

    request = await manager.add_to_basket(entry)
    print(f"Lagt til i innsynslisten: {request.id}")
    if not request.recipient_email:
        print("Mangler e-postadresse til mottaker; må fylles inn manuelt.")
    return 0


async def _find_request(manager: RequestLifecycleManager, request_id: str):
    await manager.reload()
    request = manager.get(request_id)
    if request is None:
        print(f"Fant ikke innsynskrav {request_id}", file=sys.stderr)
    return request


async def cmd_send(args, services: Services, session: SessionContext) -> int:
    session.require_approved()
    if services.dispatcher is None:
        print("Utsending krever Supabase-backend.", file=sys.stderr)
        return 1

    manager = _lifecycle(services, session)
    request = await _find_request(manager, args.request_id)
    if request is None:
        return 1

    updated = await manager.dispatch(request, confirmed=args.yes)
    if updated is None:
        if manager.error_message:
            print(f"Sendt, men klarte ikke å hente listen på nytt: {manager.error_message}", file=sys.stderr)
            return 1
        return 0
    print(f"Sendt. Status: {updated.status}")
    return 0


async def cmd_outcome(args, services: Services, session: SessionContext) -> int:
    session.require_approved()
    manager = _lifecycle(services, session)
    request = await _find_request(manager, args.request_id)
    if request is None:
        return 1

    updated = await manager.set_outcome(request, args.outcome)
    if updated is not None:
        print(f"Resultat: {updated.outcome_label}")
    return 0


async def cmd_init_db(args, services: Services, session: SessionContext) -> int:
    if args.backend != BACKEND_SQL:
        print("init-db gjelder bare SQL-backend.", file=sys.stderr)
        return 1

    from innsyn.database.connection import get_engine, init_db

    await init_db(get_engine())
    print("Tabeller opprettet.")
    return 0


COMMANDS = {
    "search": cmd_search,
    "case": cmd_case,
    "feed": cmd_feed,
    "jobs": cmd_jobs,
    "requests": cmd_requests,
    "add": cmd_add,
    "send": cmd_send,
    "outcome": cmd_outcome,
    "init-db": cmd_init_db,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="innsyn",
        description="Browse the postjournal and manage disclosure (innsyn) requests",
    )
    parser.add_argument(
        "--backend",
        choices=[BACKEND_SUPABASE, BACKEND_SQL],
        default=BACKEND_SUPABASE,
        help="Record store backend",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search journal entries")
    search.add_argument("term", nargs="?", default="", help="Free-text search term")
    search.add_argument("--source-type", help="Only entries from this source type")
    search.add_argument("--page", type=int, default=0, help="Zero-based page number")

    case = subparsers.add_parser("case", help="Show all documents in an entry's case")
    case.add_argument("entry_id", type=int)

    feed = subparsers.add_parser("feed", help="Recommended entries")
    feed.add_argument("--mode", choices=[m.value for m in RankMode], default=RankMode.BEST.value)

    jobs = subparsers.add_parser("jobs", help="Recommended job postings")
    jobs.add_argument("--mode", choices=[m.value for m in JobSortMode], default=JobSortMode.NEWEST.value)

    requests = subparsers.add_parser("requests", help="List your disclosure requests")
    requests.add_argument("--sort", choices=[SORT_NEWEST, SORT_OLDEST], default=SORT_NEWEST)

    add = subparsers.add_parser("add", help="Add an entry to the request basket")
    add.add_argument("entry_id", type=int)

    send = subparsers.add_parser("send", help="Send a request")
    send.add_argument("request_id")
    send.add_argument("--yes", action="store_true", help="Confirm sending")

    outcome = subparsers.add_parser("outcome", help="Record how a request was resolved")
    outcome.add_argument("request_id")
    outcome.add_argument("outcome", choices=[o.value for o in RequestOutcome])

    subparsers.add_parser("init-db", help="Create the tables (SQL backend only)")

    return parser


async def run(args) -> int:
    services = await build_services(args.backend)
    try:
        session = await SessionContext.initialize(services.identity)
        logger.debug(f"Running command {args.command} (backend={args.backend})")
        return await COMMANDS[args.command](args, services, session)
    finally:
        if services.close is not None:
            await services.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        app_name=settings.app_name,
        log_level="DEBUG" if args.debug else settings.logging.level,
        log_dir=settings.logging.log_dir,
        json_file=settings.logging.json_file,
        max_size_mb=settings.logging.max_size_mb,
        backup_count=settings.logging.backup_count,
    )

    logger.debug(f"Configuration: {settings.get_config_summary()}")
    if args.backend == BACKEND_SUPABASE:
        for problem in settings.validate_config():
            logger.warning(f"Configuration problem: {problem}")

    try:
        return asyncio.run(run(args))
    except InnsynError as e:
        print(e.message, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
