import pytest

from lighter_sdk.enums import (
    CancelAllTimeInForce,
    GroupingType,
    MarginDirection,
    MarginMode,
    OrderType,
    RouteType,
    TimeInForce,
)


@pytest.mark.parametrize(
    "wire, expected",
    [
        ("limit", OrderType.LIMIT),
        ("market", OrderType.MARKET),
        ("stop-loss", OrderType.STOP_LOSS),
        ("stop-loss-limit", OrderType.STOP_LOSS_LIMIT),
        ("take-profit", OrderType.TAKE_PROFIT),
        ("take-profit-limit", OrderType.TAKE_PROFIT_LIMIT),
        ("twap", OrderType.TWAP),
        ("twap-sub", OrderType.TWAP_SUB),
        ("liquidation", OrderType.LIQUIDATION),
    ],
)
def test_from_wire_str_known(wire, expected):
    assert OrderType.from_wire_str(wire) is expected


@pytest.mark.parametrize("wire", ["LIMIT", "", "stop_loss", "twap-subs"])
def test_from_wire_str_unknown(wire):
    assert OrderType.from_wire_str(wire) is None


def test_wire_strings_cover_every_order_type():
    names = [
        "limit", "market", "stop-loss", "stop-loss-limit", "take-profit",
        "take-profit-limit", "twap", "twap-sub", "liquidation",
    ]
    assert {OrderType.from_wire_str(n) for n in names} == set(OrderType)


@pytest.mark.parametrize(
    "enum",
    [OrderType, TimeInForce, GroupingType, CancelAllTimeInForce, MarginMode, RouteType, MarginDirection],
)
def test_values_are_contiguous_from_zero(enum):
    assert [member.value for member in enum] == list(range(len(enum)))


def test_round_trip_through_int():
    assert OrderType(int(OrderType.LIQUIDATION)) is OrderType.LIQUIDATION


def test_out_of_range_value_rejected():
    with pytest.raises(ValueError):
        OrderType(len(OrderType))


def test_pinned_values():
    assert GroupingType(2) is GroupingType.ONE_CANCELS_THE_OTHER
    assert RouteType(1) is RouteType.SPOT
    assert TimeInForce(2) is TimeInForce.POST_ONLY