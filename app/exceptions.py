class MarketDataError(Exception):
    """시세 조회/변환 실패"""


# 거래소 연결 실패 또는 2xx 외 응답
class NetworkError(MarketDataError):
    pass


# JSON 아님 / 예상한 구조가 아님
class ParseError(MarketDataError):
    pass
