from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Ticker(BaseModel):
    """거래소 원본 ticker (가격은 정밀도 유지를 위해 문자열 그대로)"""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    open: Optional[str] = None
    low: Optional[str] = None
    high: Optional[str] = None
    price: Optional[str] = Field(default=None, alias="last")
    volume: Optional[str] = Field(default=None, alias="vol")


class MarketSummary(BaseModel):
    market: str
    price: Optional[str] = None
    volume: Optional[str] = None
    high: Optional[str] = None
    low: Optional[str] = None
    priceChangePercent: str
