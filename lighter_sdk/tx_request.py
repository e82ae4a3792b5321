"""Unsigned transaction requests as supplied by callers."""

from __future__ import annotations

from dataclasses import dataclass

from .order_info import OrderInfo

PUB_KEY_SIZE = 40
MEMO_SIZE = 32


def _fixed_bytes(value, size, name):
    data = bytes(value)
    if len(data) != size:
        raise ValueError(f"{name} must be exactly {size} bytes, got {len(data)}")
    return data


@dataclass
class ChangePubKeyReq:
    """Request to register a new API public key."""

    pub_key: bytes

    def __post_init__(self):
        self.pub_key = _fixed_bytes(self.pub_key, PUB_KEY_SIZE, "pub_key")


@dataclass
class TransferTxReq:
    """Request to move an asset to another account."""

    to_account_index: int
    asset_index: int
    from_route_type: int
    to_route_type: int
    amount: int
    usdc_fee: int
    memo: bytes

    def __post_init__(self):
        self.memo = _fixed_bytes(self.memo, MEMO_SIZE, "memo")


@dataclass
class WithdrawTxReq:
    """Request to withdraw an asset."""

    asset_index: int
    route_type: int
    amount: int


@dataclass
class CreateOrderTxReq:
    """Request to place a single order."""

    market_index: int
    client_order_index: int
    base_amount: int
    price: int
    is_ask: int
    order_type: int
    time_in_force: int
    reduce_only: int
    trigger_price: int
    order_expiry: int

    def to_order_info(self):
        """Return the order parameters as an OrderInfo."""
        return OrderInfo(
            market_index=self.market_index,
            client_order_index=self.client_order_index,
            base_amount=self.base_amount,
            price=self.price,
            is_ask=self.is_ask,
            order_type=self.order_type,
            time_in_force=self.time_in_force,
            reduce_only=self.reduce_only,
            trigger_price=self.trigger_price,
            order_expiry=self.order_expiry,
        )


@dataclass
class CreateGroupedOrdersTxReq:
    """Request to place several related orders at once."""

    grouping_type: int
    orders: list[CreateOrderTxReq]


@dataclass
class ModifyOrderTxReq:
    """Request to change an open order."""

    market_index: int
    index: int
    base_amount: int
    price: int
    trigger_price: int


@dataclass
class CancelOrderTxReq:
    """Request to cancel one order."""

    market_index: int
    index: int


@dataclass
class CancelAllOrdersTxReq:
    """Request to cancel every open order."""

    time_in_force: int
    time: int


@dataclass
class CreatePublicPoolTxReq:
    """Request to create a public pool."""

    operator_fee: int
    initial_total_shares: int
    min_operator_share_rate: int


@dataclass
class UpdatePublicPoolTxReq:
    """Request to change a public pool's settings."""

    public_pool_index: int
    status: int
    operator_fee: int
    min_operator_share_rate: int


@dataclass
class MintSharesTxReq:
    """Request to mint shares of a public pool."""

    public_pool_index: int
    share_amount: int


@dataclass
class BurnSharesTxReq:
    """Request to burn shares of a public pool."""

    public_pool_index: int
    share_amount: int


@dataclass
class UpdateLeverageTxReq:
    """Request to change leverage on a market."""

    market_index: int
    initial_margin_fraction: int
    margin_mode: int


@dataclass
class UpdateMarginTxReq:
    """Request to add or remove isolated margin."""

    market_index: int
    usdc_amount: int
    direction: int