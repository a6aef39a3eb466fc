"""Candidate fetcher: runs a hard-filter predicate against the listing store.

Two backends, picked the same way as the rest of the service:
- JSON file (default, ``LISTINGS_DATA_FILE``)
- PostgreSQL via async SQLAlchemy when ``USE_DATABASE=true``

Either way the whole candidate set is materialized before it is returned.
``fetch_candidates`` wraps a store call with the fetch timeout and turns
any failure into ``FetchError``.
"""
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from app.database import get_session_context, is_database_enabled
from app.errors import FetchError
from app.services.match_query import Clause, ListingPredicate

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"
LISTINGS_DATA_FILE = os.getenv("LISTINGS_DATA_FILE", str(DEFAULT_DATA_DIR / "listings.json"))
FETCH_TIMEOUT_SECONDS = float(os.getenv("MATCH_FETCH_TIMEOUT_SECONDS", "10"))


class ListingFetcher(Protocol):
    async def fetch(self, predicate: ListingPredicate) -> List[Dict]:
        """Return every listing satisfying the predicate, unsorted."""
        ...


class JsonListingStore:
    """Listing store backed by a JSON file, loaded once and kept in memory."""

    def __init__(self, data_file: Optional[str] = None, listings: Optional[List[Dict]] = None):
        self.data_file = Path(data_file or LISTINGS_DATA_FILE)
        self._listings = listings

    def _load_listings(self) -> List[Dict]:
        with open(self.data_file, "r") as f:
            return json.load(f)

    @property
    def listings(self) -> List[Dict]:
        if self._listings is None:
            self._listings = self._load_listings()
        return self._listings

    async def fetch(self, predicate: ListingPredicate) -> List[Dict]:
        return [listing for listing in self.listings if predicate.matches(listing)]


def _clause_condition(model, clause: Clause):
    """Translate a pushdown clause into a SQLAlchemy condition."""
    from sqlalchemy import func, or_

    column = getattr(model, clause.field)
    if clause.op == "eq":
        return func.lower(func.trim(column)) == str(clause.value).strip().lower()
    if clause.op == "in":
        return func.lower(func.trim(column)).in_([str(v).strip().lower() for v in clause.value])
    if clause.op == "gte":
        return column >= clause.value
    if clause.op == "lte":
        return column <= clause.value
    if clause.op == "is_true":
        return column.is_(True)
    if clause.op == "not_true":
        return or_(column.is_(False), column.is_(None))
    raise ValueError(f"Clause {clause.name} ({clause.op}) cannot run in SQL")


class DatabaseListingStore:
    """Listing store backed by PostgreSQL.

    Scalar clauses run in SQL; JSONB clauses (booked periods, documents,
    house rules) are applied to the returned rows.
    """

    async def fetch(self, predicate: ListingPredicate) -> List[Dict]:
        from sqlalchemy import select
        from app.models.listing import ListingModel

        conditions = [_clause_condition(ListingModel, c) for c in predicate.pushdown_clauses]
        residual = predicate.residual_clauses

        async with get_session_context() as session:
            stmt = select(ListingModel).where(*conditions).order_by(ListingModel.created_at.desc())
            result = await session.execute(stmt)
            rows = [listing.to_dict() for listing in result.scalars()]

        return [row for row in rows if all(clause.test(row) for clause in residual)]


def get_listing_store() -> ListingFetcher:
    if is_database_enabled():
        return DatabaseListingStore()
    return JsonListingStore()


async def fetch_candidates(
    store: ListingFetcher,
    predicate: ListingPredicate,
    timeout: float = FETCH_TIMEOUT_SECONDS,
) -> List[Dict]:
    """Fetch all candidates or raise ``FetchError``. Partial results are never returned."""
    try:
        listings = await asyncio.wait_for(store.fetch(predicate), timeout=timeout)
    except asyncio.TimeoutError:
        raise FetchError(f"Listing store did not respond within {timeout:g}s")
    except FetchError:
        raise
    except Exception as e:
        logger.error(f"Listing fetch failed: {type(e).__name__}: {e}")
        raise FetchError("Listing store unavailable") from e

    logger.info(f"Fetched {len(listings)} candidate listings ({len(predicate.clauses)} clauses)")
    return list(listings)
