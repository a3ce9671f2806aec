import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence

from loguru import logger

from app.schemas.leaderboard import CacheStats

type BatchFetcher[V] = Callable[[Sequence[str]], Awaitable[Mapping[str, V]]]
type SingleFetcher[V] = Callable[[str], Awaitable[V]]


class BatchCache[V]:
    """Process-lifetime cache that resolves many player IDs with one fetch.

    Lookups that miss are filled by a single ``fetch_many`` call. If that call
    raises, each missing ID is retried with ``fetch_one`` so one bad ID cannot
    sink the batch; IDs that still fail get ``default()`` for this call only
    and are retried on the next lookup.

    IDs the batch source omits are cached as ``default()``, since omission
    means the source has no data for them.

    Concurrent lookups for overlapping IDs share the in-flight fetch and are
    counted as joins, not hits. Fills run as shielded tasks, so a cancelled
    caller never leaves an ID half-written. An unexpected fill error is raised
    in every caller waiting on it.
    """

    def __init__(
        self,
        name: str,
        *,
        fetch_many: BatchFetcher[V],
        fetch_one: SingleFetcher[V],
        default: Callable[[], V],
    ) -> None:
        self.name = name
        self._fetch_many = fetch_many
        self._fetch_one = fetch_one
        self._default = default

        self._entries: dict[str, V] = {}
        self._inflight: dict[str, asyncio.Future[V]] = {}
        self._fills: set[asyncio.Task[None]] = set()

        self._hits = 0
        self._misses = 0
        self._inflight_joins = 0
        self._batch_fetches = 0
        self._fallback_fetches = 0
        self._failures = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._entries

    async def resolve_batch(self, ids: Iterable[str]) -> dict[str, V]:
        results: dict[str, V] = {}
        pending: dict[str, asyncio.Future[V]] = {}
        missing: list[str] = []

        # No awaits until the misses are registered as in-flight
        for player_id in dict.fromkeys(ids):
            if player_id in self._entries:
                self._hits += 1
                results[player_id] = self._entries[player_id]
            elif player_id in self._inflight:
                self._inflight_joins += 1
                pending[player_id] = self._inflight[player_id]
            else:
                self._misses += 1
                missing.append(player_id)

        if missing:
            loop = asyncio.get_running_loop()
            futures = {player_id: loop.create_future() for player_id in missing}
            self._inflight.update(futures)
            pending.update(futures)

            fill = asyncio.create_task(self._fill(missing, futures))
            self._fills.add(fill)
            fill.add_done_callback(self._fills.discard)

        for player_id, future in pending.items():
            results[player_id] = await asyncio.shield(future)

        return results

    async def warm(self, ids: Sequence[str], *, chunk_size: int = 20) -> None:
        """Preload entries in chunks so a cold start doesn't issue one huge query."""
        for start in range(0, len(ids), chunk_size):
            await self.resolve_batch(ids[start : start + chunk_size])
        logger.info(f"Warmed {self.name} cache with {len(ids)} players")

    def stats(self) -> CacheStats:
        return CacheStats(
            name=self.name,
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            inflight_joins=self._inflight_joins,
            batch_fetches=self._batch_fetches,
            fallback_fetches=self._fallback_fetches,
            failures=self._failures,
        )

    async def _fill(self, missing: list[str], futures: dict[str, asyncio.Future[V]]) -> None:
        try:
            values = await self._fetch(missing)
        except Exception as e:
            logger.opt(exception=e).error(f"{self.name}: fill of {len(missing)} players failed")
            for future in futures.values():
                if not future.done():
                    future.set_exception(e)
        else:
            for player_id, future in futures.items():
                if not future.done():
                    future.set_result(values[player_id])
        finally:
            for player_id, future in futures.items():
                self._inflight.pop(player_id, None)
                if not future.done():
                    future.cancel()

    async def _fetch(self, missing: list[str]) -> dict[str, V]:
        self._batch_fetches += 1
        try:
            fetched = await self._fetch_many(missing)
        except Exception as e:
            logger.warning(
                f"{self.name}: batch fetch of {len(missing)} players failed, "
                f"falling back to individual fetches: {e}"
            )
            return await self._fetch_individually(missing)

        values: dict[str, V] = {}
        for player_id in missing:
            value = fetched[player_id] if player_id in fetched else self._default()
            self._entries[player_id] = value
            values[player_id] = value
        return values

    async def _fetch_individually(self, missing: list[str]) -> dict[str, V]:
        self._fallback_fetches += len(missing)
        outcomes = await asyncio.gather(
            *(self._fetch_one(player_id) for player_id in missing), return_exceptions=True
        )

        values: dict[str, V] = {}
        for player_id, outcome in zip(missing, outcomes, strict=True):
            if isinstance(outcome, Exception):
                self._failures += 1
                logger.warning(f"{self.name}: fetch for {player_id} failed: {outcome}")
                values[player_id] = self._default()
                continue
            if isinstance(outcome, BaseException):
                raise outcome

            self._entries[player_id] = outcome
            values[player_id] = outcome
        return values
