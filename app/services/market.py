from typing import Dict, List, Optional
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
import logging
import time

from app.models.market import MarketSummary, Ticker
from app.services.quidax import QuidaxClient

NEUTRAL_PERCENT = "0.00%"
FOUR_PLACES = Decimal("0.0001")
HUNDRED = Decimal("100")


class MarketService:
    @staticmethod
    # btc_ngn -> BTC/NGN
    def normalize_market_name(name: str) -> str:
        return name.replace("_", "/").upper()

    @staticmethod
    # Decimal() 은 "1_000", " 110 " 도 받아주므로 미리 걸러낸다
    def _is_plain_number(value: Optional[str]) -> bool:
        if not isinstance(value, str):
            return False
        return "_" not in value and value == value.strip()

    @staticmethod
    def calculate_price_change_percent(last_price: Optional[str], open_price: Optional[str]) -> str:
        """24시간 등락률 계산 (예: "+2.15%")

        소수점 넷째 자리에서 반올림(HALF_UP)한 비율에 100을 곱한다.
        숫자가 아니거나 계산 오류가 나면 "0.00%" 를 돌려준다.
        """
        if not (MarketService._is_plain_number(last_price) and MarketService._is_plain_number(open_price)):
            return NEUTRAL_PERCENT

        try:
            last = Decimal(last_price)
            open_ = Decimal(open_price)
        except (InvalidOperation, TypeError, ValueError):
            return NEUTRAL_PERCENT

        if not (last.is_finite() and open_.is_finite()):
            return NEUTRAL_PERCENT

        if open_.is_zero():
            return NEUTRAL_PERCENT  # 0으로 나누기 방지

        try:
            with localcontext() as ctx:
                # 정수부 + 소수 4자리가 잘리지 않을 만큼 정밀도 확보
                ctx.prec = 40 + abs(last.adjusted()) + abs(open_.adjusted()) \
                    + len(last.as_tuple().digits) + len(open_.as_tuple().digits)
                ratio = ((last - open_) / open_).quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)
                percent = ratio * HUNDRED
        except ArithmeticError:
            return NEUTRAL_PERCENT

        if percent.is_zero():
            percent = percent.copy_abs()  # -0.00 방지

        return f"{percent:+.2f}%"

    @staticmethod
    def build_summaries(tickers: Dict[str, Optional[Ticker]]) -> List[MarketSummary]:
        summaries = []

        for market, ticker in tickers.items():
            if ticker is None:
                continue

            summaries.append(
                MarketSummary(
                    market=MarketService.normalize_market_name(market),
                    price=ticker.price,
                    volume=ticker.volume,
                    high=ticker.high,
                    low=ticker.low,
                    priceChangePercent=MarketService.calculate_price_change_percent(ticker.price, ticker.open),
                )
            )
        return summaries

    @staticmethod
    # 전체 마켓 요약 조회
    def get_market_summaries(client: Optional[QuidaxClient] = None) -> List[MarketSummary]:
        start_time = time.time()

        tickers = (client or QuidaxClient()).fetch_tickers()
        summaries = MarketService.build_summaries(tickers)

        end_time = time.time()
        logging.info(f"Market summary {len(summaries)}건 조회 ({end_time - start_time:.2f} seconds)")

        return summaries
