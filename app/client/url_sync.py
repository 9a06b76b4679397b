"""Keeps the address bar, the filter store and the room list in step.

Three flows meet here:

* URL -> store: a navigation (including the first load) re-derives every
  filter from the query string and applies the differences in one write.
* store -> URL: a filter change made by the user is serialized and the query
  string is replaced (no new history entry) when it differs.
* store -> fetch: any filter change schedules one search request, and so
  does a write that turns loading on without changing filters (a clear on
  already-default filters).

Loops are avoided with origin tags instead of timed guard flags: store writes
coming from navigation are never written back to the URL, and URL replaces
made here are tagged `Origin.SYNC` so they are not read back as navigation.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import fields
from urllib.parse import parse_qsl

import httpx

from app.client.api import ApiError, CatalogClient
from app.client.filter_store import FilterStore, Origin, StoreChange
from app.schemas.filters import FilterParameters, filter_signature

logger = logging.getLogger(__name__)

LocationListener = Callable[[str, Origin], None]

FETCH_ERROR_MESSAGE = "Falha ao buscar quartos."


class Location:
    """The address bar: a query string plus its history entries."""

    def __init__(self, query: str = ""):
        self.history: list[str] = [query.lstrip("?")]
        self._listeners: list[LocationListener] = []

    @property
    def query(self) -> str:
        return self.history[-1]

    def subscribe(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def navigate(self, query: str) -> None:
        self.history.append(query.lstrip("?"))
        self._notify(Origin.NAVIGATION)

    def back(self) -> None:
        if len(self.history) > 1:
            self.history.pop()
            self._notify(Origin.NAVIGATION)

    def replace(self, query: str, origin: Origin = Origin.NAVIGATION) -> None:
        self.history[-1] = query.lstrip("?")
        self._notify(origin)

    def _notify(self, origin: Origin) -> None:
        for listener in list(self._listeners):
            listener(self.query, origin)


def _same_params(query_a: str, query_b: str) -> bool:
    return filter_signature(parse_qsl(query_a)) == filter_signature(parse_qsl(query_b))


class UrlSynchronizer:
    def __init__(
        self,
        store: FilterStore,
        location: Location,
        client: CatalogClient,
        loading_floor: float = 1.0,
        token_provider: Callable[[], str | None] | None = None,
    ):
        self.store = store
        self.location = location
        self.client = client
        self.loading_floor = loading_floor
        self.token_provider = token_provider
        self.generation = 0
        self._scheduled: asyncio.Handle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribers: list[Callable[[], None]] = []

    def start(self) -> None:
        """Mount: read the URL into the store and load the first page."""
        self._unsubscribers = [
            self.store.subscribe(self._on_store_change),
            self.location.subscribe(self._on_location_change),
        ]
        self.sync_from_url()
        self.schedule_fetch()

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._scheduled is not None:
            self._scheduled.cancel()
            self._scheduled = None
        # anything still in flight is stale from here on
        self.generation += 1
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait until no fetch is scheduled or running."""
        while self._scheduled is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(0)

    # URL -> store

    def sync_from_url(self) -> None:
        current = self.store.params
        from_url = FilterParameters.from_query(self.location.query, default_limit=self.store.initial.limit)
        staged = {
            f.name: getattr(from_url, f.name)
            for f in fields(FilterParameters)
            if getattr(from_url, f.name) != getattr(current, f.name)
        }
        if staged:
            logger.debug("Applying URL state: %s", staged)
            self.store.apply_url_state(staged)

    def _on_location_change(self, query: str, origin: Origin) -> None:
        if origin == Origin.SYNC:
            return
        self.sync_from_url()

    # store -> URL, store -> fetch

    def _on_store_change(self, change: StoreChange) -> None:
        if change.filters_changed:
            if change.origin != Origin.NAVIGATION:
                self.sync_to_url()
            self.schedule_fetch()
        elif change.origin != Origin.FETCH and change.current.is_loading and not change.previous.is_loading:
            # clear_filters on already-default filters still asks for fresh results
            self.schedule_fetch()

    def sync_to_url(self) -> None:
        query = self.store.params.to_query_string()
        if not _same_params(query, self.location.query):
            self.location.replace(query, origin=Origin.SYNC)

    def schedule_fetch(self) -> None:
        """Queue one fetch for the next loop iteration; same-tick changes share it."""
        if self._scheduled is not None:
            return
        self._scheduled = asyncio.get_running_loop().call_soon(self._launch_fetch)

    def _launch_fetch(self) -> None:
        self._scheduled = None
        self.generation += 1
        task = asyncio.create_task(self._fetch(self.generation, self.store.params))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, generation: int, params: FilterParameters) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        self.store.set_rooms_loading_error([], None, True, None)

        rooms: list[dict] = []
        pagination: dict | None = None
        error: str | None = None
        token = self.token_provider() if self.token_provider else None
        try:
            data = await self.client.search_rooms(params, token=token)
            rooms = data["rooms"]
            pagination = data["pagination"]
        except ApiError as exc:
            error = exc.message
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch rooms: %s", exc)
            error = str(exc) or FETCH_ERROR_MESSAGE
        except Exception:
            logger.exception("Unexpected failure fetching rooms for %s", params.to_query_string())
            rooms, pagination = [], None
            error = FETCH_ERROR_MESSAGE

        remaining = self.loading_floor - (loop.time() - started)
        if remaining > 0:
            await asyncio.sleep(remaining)

        if generation != self.generation:
            logger.debug("Discarding superseded search result %d (latest %d)", generation, self.generation)
            return
        self.store.set_rooms_loading_error(rooms, pagination, False, error)
