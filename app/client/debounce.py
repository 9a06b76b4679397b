import asyncio
from collections.abc import Callable
from typing import Any

from app.client.filter_store import FilterStore, StoreChange


class Debouncer:
    """Run `callback` once calls have stopped for `delay` seconds.

    Every call restarts the window and only the last call's arguments are
    used. `cancel()` drops whatever is pending.
    """

    def __init__(self, callback: Callable[..., Any], delay: float):
        self.callback = callback
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        self.callback(*args)


class DebouncedInput:
    """A text input bound to one store field, committed after typing pauses.

    The local value follows the store whenever the store field changes from
    elsewhere (clear, navigation); that also drops any pending commit.
    """

    def __init__(self, store: FilterStore, field: str = "name", delay: float = 0.7):
        self.store = store
        self.field = field
        self.value: str = getattr(store.params, field)
        self._debouncer = Debouncer(self._commit, delay)
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def on_input(self, value: str) -> None:
        self.value = value
        if value != getattr(self.store.params, self.field):
            self._debouncer(value)
        else:
            self._debouncer.cancel()

    def cancel(self) -> None:
        """Unmount: drop the pending commit and stop following the store."""
        self._debouncer.cancel()
        self._unsubscribe()

    def _commit(self, value: str) -> None:
        if getattr(self.store.params, self.field) != value:
            self.store.set_filters(**{self.field: value})

    def _on_store_change(self, change: StoreChange) -> None:
        if self.field not in change.changed_fields():
            return
        stored = getattr(change.current.params, self.field)
        if stored != self.value:
            self._debouncer.cancel()
            self.value = stored
