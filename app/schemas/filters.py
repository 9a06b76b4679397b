"""Search filter parameters shared by the API and the client state layer.

The same serialization (`filter_signature`) is used as the response cache key
on the server and as the address-bar query string on the client, so the two
always carry the same parameter set.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from urllib.parse import parse_qsl, urlencode

FEATURE_LABELS: dict[str, str] = {
    "wifi": "Wi-Fi",
    "ac": "Ar-condicionado",
    "varanda": "Varanda",
    "piscina": "Piscina Privativa",
    "vistaMar": "Vista para o Mar",
    "cozinha": "Cozinha Compacta",
    "banheira": "Banheira",
    "lareira": "Lareira",
    "cafe": "Café da Manhã",
}

ORDER_FIELDS = ("name", "price", "capacity")
ORDER_DIRECTIONS = ("asc", "desc")

DEFAULT_PAGE_SIZE = 10

# fields that select which rooms are shown; rooms/pagination/loading are excluded
FILTER_FIELDS = (
    "name",
    "price_min",
    "price_max",
    "capacity",
    "features",
    "favorite_only",
    "order_by",
    "order_direction",
    "page",
    "limit",
)


def empty_features() -> dict[str, bool]:
    return {key: False for key in FEATURE_LABELS}


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def _float_or_none(raw: str) -> float | None:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _int_or_none(raw: str) -> int | None:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class FilterParameters:
    name: str = ""
    price_min: str = ""
    price_max: str = ""
    capacity: str = ""
    features: dict[str, bool] = field(default_factory=empty_features)
    favorite_only: bool = False
    order_by: str = ""
    order_direction: str = "asc"
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_query(
        cls,
        params: Mapping[str, str] | str,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int | None = None,
    ) -> "FilterParameters":
        """Parse raw query-string values. Unknown keys are ignored."""
        if isinstance(params, str):
            params = dict(parse_qsl(params.lstrip("?"), keep_blank_values=True))

        order_by = params.get("orderBy", "")
        if order_by not in ORDER_FIELDS:
            order_by = ""
        order_direction = params.get("orderDirection", "asc")
        if order_direction not in ORDER_DIRECTIONS:
            order_direction = "asc"

        limit = _positive_int(params.get("limit"), default_limit)
        if max_limit is not None:
            limit = min(limit, max_limit)

        return cls(
            name=params.get("name", ""),
            price_min=params.get("priceMin", ""),
            price_max=params.get("priceMax", ""),
            capacity=params.get("capacity", ""),
            features={key: params.get(key) == "true" for key in FEATURE_LABELS},
            favorite_only=params.get("favoriteOnly") == "true",
            order_by=order_by,
            order_direction=order_direction,
            page=_positive_int(params.get("page"), 1),
            limit=limit,
        )

    def to_query_items(self, include_paging: bool = False) -> list[tuple[str, str]]:
        """Non-default values as query items.

        With `include_paging` the page and limit are always present, which is
        what the search request and the cache key need.
        """
        items: list[tuple[str, str]] = []
        if self.name:
            items.append(("name", self.name))
        if self.price_min:
            items.append(("priceMin", self.price_min))
        if self.price_max:
            items.append(("priceMax", self.price_max))
        if self.capacity:
            items.append(("capacity", self.capacity))
        items.extend((key, "true") for key in FEATURE_LABELS if self.features.get(key))
        if self.favorite_only:
            items.append(("favoriteOnly", "true"))
        if self.order_by:
            items.append(("orderBy", self.order_by))
            items.append(("orderDirection", self.order_direction))
        if include_paging or self.page != 1:
            items.append(("page", str(self.page)))
        if include_paging or self.limit != DEFAULT_PAGE_SIZE:
            items.append(("limit", str(self.limit)))
        return items

    def to_query_string(self, include_paging: bool = False) -> str:
        return filter_signature(self.to_query_items(include_paging=include_paging))

    def with_changes(self, **changes) -> "FilterParameters":
        return replace(self, **changes)

    # typed predicate values; unparsable input means "no predicate"
    @property
    def price_min_value(self) -> float | None:
        return _float_or_none(self.price_min)

    @property
    def price_max_value(self) -> float | None:
        return _float_or_none(self.price_max)

    @property
    def capacity_value(self) -> int | None:
        return _int_or_none(self.capacity)

    @property
    def requested_features(self) -> list[str]:
        return [FEATURE_LABELS[key] for key in FEATURE_LABELS if self.features.get(key)]


def filter_signature(items: Iterable[tuple[str, str]]) -> str:
    """Canonical serialization: keys sorted, then URL-encoded."""
    return urlencode(sorted(items))
