"""
PriceSource - 토큰 USD 가격 제공자

코어는 get_price(token_address) -> float 인터페이스만 사용합니다.
가격의 신선도(freshness)는 PriceSource 구현의 책임이며,
가격 조회 실패는 PriceUnavailableError로 전파됩니다 (기본값으로 대체하지 않음).

구현:
- StaticPriceSource: 주소 -> 가격 고정 테이블
- CachedPriceSource: 다른 PriceSource 위의 TTL 캐시
"""

import logging
import math
import time
from typing import Callable, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from ..exceptions import PriceUnavailableError

logger = logging.getLogger(__name__)


# 주요 스테이블코인 (Ethereum / Arbitrum)
STABLECOIN_ADDRESSES: Tuple[str, ...] = (
    "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",  # USDC
    "0xdAC17F958D2ee523a2206206994597C13D831ec7",  # USDT
    "0x6B175474E89094C44Da98b954EedeAC495271d0F",  # DAI
    "0x4Fabb145d64652a948d72533023f6E7A623C7C53",  # BUSD
    "0xFF970A61A04b1cA14834A43f5dE4533eBDDB5CC8",  # USDC.e (Arbitrum)
    "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",  # USDC (Arbitrum)
    "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",  # USDT (Arbitrum)
)


class PriceSource(Protocol):
    """토큰 가격 제공자 인터페이스"""

    def get_price(self, token_address: str) -> float:
        ...


class StaticPriceSource:
    """고정 가격 테이블

    주소는 대소문자를 구분하지 않습니다 (체크섬 주소와 소문자 주소 모두 허용).
    """

    def __init__(self, prices: Mapping[str, float]):
        self._prices: Dict[str, float] = {
            address.lower(): float(price) for address, price in prices.items()
        }

    def get_price(self, token_address: str) -> float:
        price = self._prices.get(token_address.lower())
        if price is None:
            raise PriceUnavailableError(token_address, "정적 가격 테이블에 없음")
        return price

    def set_price(self, token_address: str, price: float) -> None:
        self._prices[token_address.lower()] = float(price)


class CachedPriceSource:
    """TTL 캐시 PriceSource

    하위 소스의 결과를 ttl_seconds 동안 재사용합니다.
    하위 소스의 실패는 캐시하지 않고 그대로 전파합니다.
    스레드 안전하지 않습니다.
    """

    def __init__(
        self,
        source: PriceSource,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Tuple[float, float]] = {}

    def get_price(self, token_address: str) -> float:
        key = token_address.lower()
        now = self._clock()

        cached = self._cache.get(key)
        if cached is not None:
            price, fetched_at = cached
            if now - fetched_at < self._ttl_seconds:
                return price

        price = self._source.get_price(token_address)
        self._cache[key] = (price, now)
        logger.debug("가격 캐시 갱신: %s = %s", token_address, price)
        return price

    def clear_cache(self) -> None:
        self._cache.clear()


def create_stablecoin_price_source(
    extra_prices: Optional[Mapping[str, float]] = None,
    ttl_seconds: float = 300.0
) -> CachedPriceSource:
    """스테이블코인 $1 고정 가격 소스 (테스트 및 스테이블 페어용)"""
    prices: Dict[str, float] = {address: 1.0 for address in STABLECOIN_ADDRESSES}
    if extra_prices:
        prices.update(extra_prices)
    return CachedPriceSource(StaticPriceSource(prices), ttl_seconds=ttl_seconds)


def fetch_price(source: PriceSource, token_address: str) -> float:
    """PriceSource 호출 후 실패를 PriceUnavailableError로 통일

    Raises:
        PriceUnavailableError: 조회 실패 또는 유효하지 않은 가격
    """
    try:
        price = source.get_price(token_address)
    except PriceUnavailableError:
        raise
    except Exception as e:
        raise PriceUnavailableError(token_address, str(e)) from e

    if price is None or not math.isfinite(price) or price < 0:
        raise PriceUnavailableError(token_address, f"유효하지 않은 가격: {price}")
    return float(price)


def get_relative_price(source: PriceSource, token0: str, token1: str) -> float:
    """풀 가격 (token1/token0) = token0 USD 가격 / token1 USD 가격"""
    price0 = fetch_price(source, token0)
    price1 = fetch_price(source, token1)
    if price1 == 0:
        raise PriceUnavailableError(token1, "가격이 0")
    return price0 / price1


def get_prices(source: PriceSource, tokens: Iterable[str]) -> Dict[str, float]:
    """여러 토큰 가격 일괄 조회

    조회에 실패한 토큰은 경고 로그를 남기고 결과에서 제외합니다.
    """
    prices: Dict[str, float] = {}
    for token in tokens:
        try:
            price = fetch_price(source, token)
        except PriceUnavailableError as e:
            logger.warning("가격 조회 실패: %s", e)
            continue
        if price > 0:
            prices[token] = price
    return prices
