from __future__ import annotations

from xpay_gateway.schemas.portfolio import Holding, RiskBand

STABLECOINS = {'USDC', 'USDT', 'DAI'}

_LOW_RISK_STABLE_PCT = 70
_MEDIUM_RISK_STABLE_PCT = 40


def portfolio_risk(holdings: list[Holding]) -> RiskBand:
    total_value = sum(h.usd_value for h in holdings)
    if not holdings or total_value <= 0:
        return RiskBand(level='neutral', stable_percentage=0.0, total_value=total_value)

    stable_value = sum(h.usd_value for h in holdings if h.token_symbol.strip().upper() in STABLECOINS)
    stable_percentage = stable_value / total_value * 100

    if stable_percentage > _LOW_RISK_STABLE_PCT:
        level = 'Low Risk'
    elif stable_percentage > _MEDIUM_RISK_STABLE_PCT:
        level = 'Medium Risk'
    else:
        level = 'High Risk'
    return RiskBand(level=level, stable_percentage=stable_percentage, total_value=total_value)
