import os
import logging
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv
from pydantic import ValidationError

from app.exceptions import NetworkError, ParseError
from app.models.market import Ticker

load_dotenv()

QUIDAX_TICKERS_URL = os.getenv("QUIDAX_TICKERS_URL", "https://app.quidax.io/api/v1/markets/tickers")
QUIDAX_TIMEOUT = float(os.getenv("QUIDAX_TIMEOUT", "10"))

# ticker 원본 필드 (last, vol 은 wire 이름)
TICKER_FIELDS = ("open", "low", "high", "last", "vol")

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "python:quidax-market-summary:v1.0",
}


def _unwrap_envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
    # {"status": "success", "data": {"btc_ngn": {"ticker": {...}}}}
    status = payload.get("status")
    if status != "success":
        logging.warning(f"Quidax 응답 status가 success가 아님: {status}")
        return {}

    data = payload.get("data")
    if not isinstance(data, dict):
        raise ParseError(f"data 필드 형식 오류: 객체가 필요한데 {type(data).__name__}")

    markets = {}
    for market, entry in data.items():
        if entry is None:
            markets[market] = None
        elif isinstance(entry, dict):
            markets[market] = entry.get("ticker")
        else:
            raise ParseError(f"{market} 마켓 데이터 형식 오류: {entry!r}")
    return markets


def _unwrap_flat(payload: Dict[str, Any]) -> Dict[str, Any]:
    # {"btc_ngn": {...}} 또는 {"btc_ngn": {"ticker": {...}}}
    markets = {}
    for market, entry in payload.items():
        if entry is None:
            markets[market] = None
        elif isinstance(entry, dict):
            if "ticker" in entry:
                markets[market] = entry["ticker"]
            elif any(field in entry for field in TICKER_FIELDS):
                markets[market] = entry
            else:
                markets[market] = None  # ticker 필드 없음
        else:
            raise ParseError(f"{market} 마켓 데이터 형식 오류: {entry!r}")
    return markets


def unwrap_markets(payload: Any) -> Dict[str, Any]:
    """원본 응답을 {마켓: ticker dict 또는 None} 으로 펼친다.

    status 필드가 있으면 envelope 방식, 없으면 마켓 맵 그대로(flat)로 본다.
    """
    if not isinstance(payload, dict):
        raise ParseError(f"응답 형식 오류: 객체가 필요한데 {type(payload).__name__}")

    if "status" in payload:
        return _unwrap_envelope(payload)
    return _unwrap_flat(payload)


def parse_tickers(payload: Any) -> Dict[str, Ticker]:
    tickers = {}
    for market, raw in unwrap_markets(payload).items():
        if raw is None:
            logging.debug(f"{market}: ticker 없음, 건너뜀")
            continue
        if not isinstance(raw, dict):
            raise ParseError(f"{market} ticker 형식 오류: {raw!r}")
        try:
            tickers[market] = Ticker.model_validate(raw)
        except ValidationError as e:
            raise ParseError(f"{market} ticker 필드 오류: {e}") from e
    return tickers


class QuidaxClient:
    """Quidax 공개 시세 API 클라이언트 (인증 불필요)"""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url or QUIDAX_TICKERS_URL
        self.timeout = timeout if timeout is not None else QUIDAX_TIMEOUT

    # 전체 마켓 ticker 조회
    def fetch_tickers(self) -> Dict[str, Ticker]:
        session = requests.Session()
        try:
            logging.info(f"Quidax tickers 요청: {self.url}")
            response = session.get(self.url, headers=HEADERS, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.JSONDecodeError as e:
            logging.error(f"Quidax 응답 JSON 파싱 실패: {str(e)}")
            raise ParseError(f"Quidax 응답이 JSON이 아님: {e}") from e
        except requests.RequestException as e:
            logging.error(f"Quidax 요청 실패: {str(e)}")
            raise NetworkError(f"Quidax 요청 실패: {e}") from e
        finally:
            session.close()

        return parse_tickers(payload)
