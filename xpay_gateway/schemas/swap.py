from typing import Literal

from pydantic import BaseModel, field_validator


class CreateSwapRequest(BaseModel):
    depositCoin: str | None = None
    settleCoin: str | None = None
    depositAmount: str | None = None
    settleAmount: str | None = None
    affiliateId: str | None = None


class SwapSimulationRequest(BaseModel):
    from_symbol: str
    to_symbol: str
    balance: float
    percent: float

    @field_validator("from_symbol", "to_symbol")
    @classmethod
    def normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()


class SwapSimulation(BaseModel):
    from_token: str
    to_token: str
    from_amount: float
    to_amount: float
    swap_rate: float
    usd_value: float
    gas_fee: float
    remaining_from_balance: float
    from_usd_value: float
    status: Literal["pending", "completed", "failed"] = "completed"
    trigger_type: Literal["manual", "ai_suggestion", "automation"] = "manual"
    ai_reasoning: str | None = None
