from dataclasses import dataclass

from app.client.api import CatalogClient
from app.client.auth_store import AuthStore
from app.client.debounce import DebouncedInput
from app.client.filter_store import FilterStore
from app.client.url_sync import Location, UrlSynchronizer
from app.config import settings


@dataclass
class SearchPage:
    """The search screen's state wiring: store, address bar, sync and the name input."""

    store: FilterStore
    location: Location
    sync: UrlSynchronizer
    name_input: DebouncedInput

    @classmethod
    def mount(
        cls,
        client: CatalogClient,
        query: str = "",
        auth: AuthStore | None = None,
        debounce_ms: int | None = None,
        loading_floor_ms: int | None = None,
    ) -> "SearchPage":
        """Build and start the page; must be called inside a running event loop."""
        debounce_ms = settings.search_debounce_ms if debounce_ms is None else debounce_ms
        loading_floor_ms = settings.loading_floor_ms if loading_floor_ms is None else loading_floor_ms

        store = FilterStore()
        location = Location(query)
        sync = UrlSynchronizer(
            store,
            location,
            client,
            loading_floor=loading_floor_ms / 1000,
            token_provider=(lambda: auth.token) if auth else None,
        )
        sync.start()
        name_input = DebouncedInput(store, "name", delay=debounce_ms / 1000)
        return cls(store=store, location=location, sync=sync, name_input=name_input)

    async def unmount(self) -> None:
        self.name_input.cancel()
        await self.sync.stop()
