from app.schemas.filters import FEATURE_LABELS, FilterParameters, filter_signature


def test_from_query_parses_raw_strings():
    params = FilterParameters.from_query(
        {
            "name": "suíte",
            "priceMin": "100",
            "priceMax": "500.5",
            "capacity": "2",
            "wifi": "true",
            "ac": "1",
            "orderBy": "price",
            "orderDirection": "desc",
            "page": "3",
            "limit": "5",
            "unknown": "x",
        }
    )
    assert params.name == "suíte"
    assert params.price_min_value == 100.0
    assert params.price_max_value == 500.5
    assert params.capacity_value == 2
    assert params.features["wifi"] is True
    # only the literal "true" enables a feature
    assert params.features["ac"] is False
    assert params.requested_features == ["Wi-Fi"]
    assert params.order_by == "price"
    assert params.order_direction == "desc"
    assert params.page == 3
    assert params.limit == 5


def test_from_query_defaults_and_malformed_values():
    params = FilterParameters.from_query(
        {"page": "zero", "limit": "-4", "orderBy": "id", "orderDirection": "sideways", "priceMin": "abc"}
    )
    assert params.page == 1
    assert params.limit == 10
    assert params.order_by == ""
    assert params.order_direction == "asc"
    assert params.price_min_value is None
    assert params.capacity_value is None


def test_from_query_caps_limit():
    assert FilterParameters.from_query({"limit": "1000"}, max_limit=100).limit == 100


def test_from_query_accepts_query_string():
    params = FilterParameters.from_query("?name=Loft&vistaMar=true&page=2")
    assert params.name == "Loft"
    assert params.features["vistaMar"] is True
    assert params.page == 2


def test_query_items_omit_defaults():
    assert FilterParameters().to_query_items() == []
    assert FilterParameters().to_query_string(include_paging=True) == "limit=10&page=1"


def test_order_fields_serialized_together():
    params = FilterParameters(order_by="name", order_direction="asc")
    assert ("orderBy", "name") in params.to_query_items()
    assert ("orderDirection", "asc") in params.to_query_items()

    without_order = FilterParameters(order_direction="desc")
    assert without_order.to_query_items() == []


def test_only_true_features_serialized():
    features = {key: False for key in FEATURE_LABELS} | {"lareira": True}
    params = FilterParameters(features=features, favorite_only=True, page=2)
    assert params.to_query_string() == "favoriteOnly=true&lareira=true&page=2"


def test_signature_ignores_item_order():
    assert filter_signature([("b", "2"), ("a", "1")]) == filter_signature([("a", "1"), ("b", "2")])


def test_query_string_round_trip():
    original = "wifi=true&name=Su%C3%ADte&priceMax=900&orderBy=capacity&orderDirection=desc&page=4"
    params = FilterParameters.from_query(original)
    assert FilterParameters.from_query(params.to_query_string()) == params
