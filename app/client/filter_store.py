"""Client-side search state: filters, sort, page and the last fetched result.

`FilterStore` is an explicit container rather than a module global, so every
page (and every test) can own an isolated instance. Writes are synchronous;
each one notifies subscribers with a `StoreChange` tagged by its origin.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import Any

from app.schemas.filters import FEATURE_LABELS, FILTER_FIELDS, ORDER_DIRECTIONS, ORDER_FIELDS, FilterParameters


class Origin(StrEnum):
    USER = "user"
    NAVIGATION = "navigation"
    FETCH = "fetch"
    SYNC = "sync"


@dataclass(frozen=True)
class FilterState:
    params: FilterParameters = field(default_factory=FilterParameters)
    rooms: list[dict[str, Any]] = field(default_factory=list)
    pagination: dict[str, int] | None = None
    is_loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class StoreChange:
    origin: Origin
    previous: FilterState
    current: FilterState

    @property
    def filters_changed(self) -> bool:
        return self.previous.params != self.current.params

    def changed_fields(self) -> set[str]:
        return {
            f.name
            for f in fields(FilterParameters)
            if getattr(self.previous.params, f.name) != getattr(self.current.params, f.name)
        }


Listener = Callable[[StoreChange], None]

# fields kept across clear_filters(): sorting and the favorites view are not filters
_PRESERVED_ON_CLEAR = ("order_by", "order_direction", "favorite_only")


class FilterStore:
    def __init__(self, initial: FilterParameters | None = None):
        self._initial = initial or FilterParameters()
        self._state = FilterState(params=self._initial)
        self._listeners: list[Listener] = []

    # reads

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def params(self) -> FilterParameters:
        return self._state.params

    @property
    def initial(self) -> FilterParameters:
        return self._initial

    def __getattr__(self, name: str):
        # filter values and result fields read straight off the store
        if name in FILTER_FIELDS:
            return getattr(self._state.params, name)
        if name in ("rooms", "pagination", "is_loading", "error"):
            return getattr(self._state, name)
        raise AttributeError(name)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # writes

    def set_filters(self, origin: Origin = Origin.USER, **partial: Any) -> None:
        """Merge filter values.

        Unless `page` is the only value given, the page goes back to 1. The
        result set is cleared; `is_loading` is left as it is. `features` is
        merged key by key into the current map rather than replacing it.
        """
        changes = self._validated(partial)
        if set(partial) != {"page"}:
            changes["page"] = 1
        self._commit(
            origin,
            params=self.params.with_changes(**changes),
            rooms=[],
            pagination=None,
            error=None,
        )

    def clear_filters(self, origin: Origin = Origin.USER) -> None:
        kept = {name: getattr(self.params, name) for name in _PRESERVED_ON_CLEAR}
        self._commit(
            origin,
            params=self._initial.with_changes(features=dict(self._initial.features), **kept),
            rooms=[],
            pagination=None,
            error=None,
            is_loading=True,
        )

    def set_page(self, page: int, origin: Origin = Origin.USER) -> None:
        changes = self._validated({"page": page})
        self._commit(origin, params=self.params.with_changes(**changes), rooms=[], pagination=None, error=None)

    def set_order(self, order_by: str, order_direction: str, origin: Origin = Origin.USER) -> None:
        # the current page is kept on purpose
        changes = self._validated({"order_by": order_by, "order_direction": order_direction})
        self._commit(origin, params=self.params.with_changes(**changes), rooms=[], pagination=None, error=None)

    def set_favorite_only(self, favorite_only: bool, origin: Origin = Origin.USER) -> None:
        self._commit(
            origin,
            params=self.params.with_changes(favorite_only=bool(favorite_only), page=1),
            rooms=[],
            pagination=None,
            error=None,
        )

    def set_rooms_loading_error(
        self,
        rooms: list[dict[str, Any]],
        pagination: dict[str, int] | None,
        is_loading: bool,
        error: str | None,
    ) -> None:
        self._commit(
            Origin.FETCH,
            rooms=list(rooms),
            pagination=pagination,
            is_loading=is_loading,
            error=error,
        )

    def apply_url_state(self, values: dict[str, Any]) -> None:
        """Apply values read from the address bar in one write.

        The page comes from the URL as-is; it is not reset the way
        `set_filters` resets it.
        """
        changes = self._validated(values)
        self._commit(
            Origin.NAVIGATION,
            params=self.params.with_changes(**changes),
            rooms=[],
            pagination=None,
            error=None,
        )

    def _validated(self, partial: dict[str, Any]) -> dict[str, Any]:
        unknown = set(partial) - set(FILTER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown filter fields: {sorted(unknown)}")

        changes = dict(partial)
        if "features" in changes:
            merged = dict(self.params.features)
            merged.update({k: bool(v) for k, v in changes["features"].items() if k in FEATURE_LABELS})
            changes["features"] = merged
        if "page" in changes:
            page = int(changes["page"])
            if page < 1:
                raise ValueError("page must be >= 1")
            changes["page"] = page
        if "order_by" in changes and changes["order_by"] not in ("", *ORDER_FIELDS):
            raise ValueError(f"Unsupported order_by: {changes['order_by']!r}")
        if "order_direction" in changes and changes["order_direction"] not in ORDER_DIRECTIONS:
            raise ValueError(f"Unsupported order_direction: {changes['order_direction']!r}")
        return changes

    def _commit(self, origin: Origin, **changes: Any) -> None:
        previous = self._state
        self._state = replace(previous, **changes)
        change = StoreChange(origin=origin, previous=previous, current=self._state)
        for listener in list(self._listeners):
            listener(change)
