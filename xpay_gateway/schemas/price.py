from pydantic import BaseModel, Field, field_validator


class TokenPriceSnapshot(BaseModel):
    symbol: str
    price: float = Field(ge=0)
    change_24h: float = 0.0
    market_cap: float = Field(default=0.0, ge=0)
    name: str | None = None
    image: str | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()


class ResolveRequest(BaseModel):
    symbol: str
