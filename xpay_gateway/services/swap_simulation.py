from __future__ import annotations

import random

from xpay_gateway.schemas.swap import SwapSimulation, SwapSimulationRequest
from xpay_gateway.services.price_feed import PriceFeed

_GAS_FEE_MIN = 0.5
_GAS_FEE_MAX = 3.0


def _random_gas_fee() -> float:
    return max(_GAS_FEE_MIN, random.random() * _GAS_FEE_MAX)


def simulate_swap(
    feed: PriceFeed,
    req: SwapSimulationRequest,
    *,
    gas_fee: float | None = None,
) -> SwapSimulation:
    """Price a manual swap locally from the feed's last snapshots.

    Nothing is executed or persisted; the caller gets back the record it
    would store in its swap history.
    """
    if req.percent <= 0 or req.percent > 100:
        raise ValueError('INVALID_PERCENT')
    if req.balance <= 0:
        raise ValueError('INVALID_BALANCE')

    from_snap = feed.get_price(req.from_symbol)
    to_snap = feed.get_price(req.to_symbol)
    # unknown quote token prices at 1 so to_amount stays finite
    from_price = from_snap.price if from_snap and from_snap.price else 0.0
    to_price = to_snap.price if to_snap and to_snap.price else 1.0

    from_amount = req.balance * req.percent / 100
    usd_value = from_amount * from_price
    to_amount = usd_value / to_price
    swap_rate = to_amount / from_amount if from_amount else 0.0
    remaining = req.balance - from_amount

    return SwapSimulation(
        from_token=req.from_symbol,
        to_token=req.to_symbol,
        from_amount=from_amount,
        to_amount=to_amount,
        swap_rate=swap_rate,
        usd_value=usd_value,
        gas_fee=_random_gas_fee() if gas_fee is None else gas_fee,
        remaining_from_balance=remaining,
        from_usd_value=remaining * from_price,
        status='completed',
        trigger_type='manual',
        ai_reasoning=f'Quick swap {req.percent:g}% of {req.from_symbol}',
    )
