from typing import List

from fastapi import APIRouter, HTTPException

from app.exceptions import MarketDataError
from app.models.market import MarketSummary
from app.services.market import MarketService

router = APIRouter(prefix="/api/v1", tags=["market"])

# 전체 마켓 요약 (가격, 거래량, 고가, 저가, 24h 등락률)
@router.get("/summary", response_model=List[MarketSummary])
def get_market_summaries():
    try:
        return MarketService.get_market_summaries()
    except MarketDataError as e:
        # 거래소 쪽 문제는 502로 전달
        raise HTTPException(status_code=502, detail=str(e)) from e
