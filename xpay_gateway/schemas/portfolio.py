from pydantic import BaseModel


class Holding(BaseModel):
    token_symbol: str
    balance: float = 0.0
    usd_value: float


class PortfolioRiskRequest(BaseModel):
    holdings: list[Holding]


class RiskBand(BaseModel):
    level: str
    stable_percentage: float
    total_value: float
