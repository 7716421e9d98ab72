"""Result store over a PostgREST-style REST datastore."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from tradescore.exceptions import ConfigurationError, PersistenceError
from tradescore.scoring import CompositeResult, ScoringDomain

if TYPE_CHECKING:
    from tradescore.config import Settings
    from tradescore.screening import SafetyAssessment

logger = logging.getLogger(__name__)

DOMAIN_TABLES: dict[ScoringDomain, str] = {
    ScoringDomain.TIMING: "timing_history",
    ScoringDomain.SENTIMENT: "sentiment_history",
    ScoringDomain.FUNDAMENTALS: "fundamentals_history",
    ScoringDomain.REGIME: "market_regime_history",
}

SCREENING_TABLE = "invite_list_history"

# Rows per bulk insert request.
INSERT_CHUNK = 15


class RestResultStore:
    """Append-only result history, one table per scoring domain.

    Every insert is a single atomic POST; the store never updates rows,
    so concurrent batches may add duplicates but cannot corrupt history.
    """

    API_PREFIX = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        tables: Mapping[ScoringDomain, str] | None = None,
        screening_table: str = SCREENING_TABLE,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._tables = dict(tables or DOMAIN_TABLES)
        self._screening_table = "/" + screening_table
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/") + self.API_PREFIX,
            timeout=httpx.Timeout(timeout, connect=10.0),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> RestResultStore:
        if not settings.result_store_url or not settings.result_store_api_key:
            raise ConfigurationError(
                "RESULT_STORE_URL and RESULT_STORE_API_KEY must be set"
            )
        return cls(
            settings.result_store_url,
            settings.result_store_api_key,
            timeout=settings.http_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RestResultStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _table(self, domain: ScoringDomain) -> str:
        return "/" + self._tables[ScoringDomain(domain)]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            resp = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise PersistenceError(f"{method} {path} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise PersistenceError(
                f"{method} {path} returned {resp.status_code}: {resp.text[:200]}"
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise PersistenceError(f"{method} {path}: response is not JSON") from exc

    @staticmethod
    def _ids(rows: Any, expected: int) -> list[str]:
        if not isinstance(rows, list) or len(rows) != expected:
            raise PersistenceError(
                f"expected {expected} inserted row(s), got {rows!r:.200}"
            )
        try:
            return [str(row["id"]) for row in rows]
        except (KeyError, TypeError) as exc:
            raise PersistenceError("inserted rows carry no id") from exc

    # ------------------------------------------------------------------
    # ResultStore
    # ------------------------------------------------------------------

    async def get_latest(
        self, symbol: str, domain: ScoringDomain
    ) -> CompositeResult | None:
        rows = await self._request(
            "GET",
            self._table(domain),
            params={
                "symbol": f"eq.{symbol}",
                "order": "computed_at.desc",
                "limit": "1",
            },
        )
        if not rows:
            return None
        try:
            return CompositeResult.from_record(rows[0])
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"malformed {domain} row for {symbol}: {exc}") from exc

    async def insert(self, result: CompositeResult) -> str:
        rows = await self._request(
            "POST",
            self._table(result.domain),
            json=result.to_record(),
            headers={"Prefer": "return=representation"},
        )
        return self._ids(rows, 1)[0]

    async def insert_batch(self, results: Sequence[CompositeResult]) -> list[str]:
        """Insert in chunks per domain table; ids follow the input order."""
        by_domain: dict[ScoringDomain, list[int]] = defaultdict(list)
        for index, result in enumerate(results):
            by_domain[result.domain].append(index)

        ids: list[str | None] = [None] * len(results)
        for domain, indices in by_domain.items():
            for start in range(0, len(indices), INSERT_CHUNK):
                chunk = indices[start:start + INSERT_CHUNK]
                rows = await self._request(
                    "POST",
                    self._table(domain),
                    json=[results[i].to_record() for i in chunk],
                    headers={"Prefer": "return=representation"},
                )
                for index, row_id in zip(chunk, self._ids(rows, len(chunk))):
                    ids[index] = row_id
                logger.debug("Inserted %d %s rows", len(chunk), domain.value)
        return [row_id for row_id in ids if row_id is not None]

    async def insert_assessments(
        self, assessments: Sequence[SafetyAssessment]
    ) -> list[str]:
        """Append safety assessments to the screening history, in chunks."""
        ids: list[str] = []
        for start in range(0, len(assessments), INSERT_CHUNK):
            chunk = assessments[start:start + INSERT_CHUNK]
            rows = await self._request(
                "POST",
                self._screening_table,
                json=[a.to_record() for a in chunk],
                headers={"Prefer": "return=representation"},
            )
            ids.extend(self._ids(rows, len(chunk)))
        logger.debug("Inserted %d screening rows", len(ids))
        return ids
