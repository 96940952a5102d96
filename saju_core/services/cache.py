"""
캐시 서비스
- 동일 출생 시각에 대한 4주 계산 결과 캐싱
- 메모리 기반, 스레드 안전 (cachetools 캐시는 자체 동기화가 없음)
"""
from typing import Optional, Tuple
from cachetools import TTLCache
import logging
import threading

from saju_core.config import get_settings

logger = logging.getLogger(__name__)

ChartKey = Tuple[str, int, int, int, int, int]


class CacheService:
    """
    계산 결과 캐싱 서비스

    키: (만세력 백엔드 이름, 년, 월, 일, 시, 분)
    값: (FourPillars, source) - 파싱까지 성공한 결과만 저장

    캐시 조회/저장/통계는 모두 self._lock 안에서 수행한다.
    max_size=0 이면 저장하지 않는다 (캐시 비활성).
    """

    def __init__(self, max_size: Optional[int] = None, ttl_seconds: Optional[int] = None):
        settings = get_settings()
        self.max_size = settings.cache_max_size if max_size is None else max_size
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.chart_cache = TTLCache(maxsize=self.max_size, ttl=self.ttl_seconds)
        self._lock = threading.RLock()

        # 통계
        self._hits = 0
        self._misses = 0

    def get_chart(self, key: ChartKey):
        """4주 캐시 조회 (없으면 None)"""
        with self._lock:
            result = self.chart_cache.get(key)

            if result is not None:
                self._hits += 1
            else:
                self._misses += 1

            return result

    def set_chart(self, key: ChartKey, value) -> None:
        if self.max_size <= 0:
            return
        with self._lock:
            self.chart_cache[key] = value

    def get_stats(self) -> dict:
        """캐시 통계 조회"""
        with self._lock:
            hits, misses = self._hits, self._misses
            size = len(self.chart_cache)

        total = hits + misses
        hit_rate = (hits / total * 100) if total > 0 else 0

        return {
            "hits": hits,
            "misses": misses,
            "hit_rate": f"{hit_rate:.1f}%",
            "chart_cache_size": size,
        }

    def clear(self):
        """캐시 초기화"""
        with self._lock:
            self.chart_cache.clear()
            self._hits = 0
            self._misses = 0
        logger.info("🧹 chart cache cleared")


# 싱글톤 인스턴스
cache_service = CacheService()
