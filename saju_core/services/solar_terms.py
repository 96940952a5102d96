"""
12절(節) 데이터 및 절입 시각 판정 (ephem)
- 월주 계산의 핵심: 태양 황경이 어느 절 구간인지 판단
- 입춘(황경 315°) 기준 연주 보정
- 절입 시각 역산 (이분법)
"""
import math
import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple
from dataclasses import dataclass

import ephem

from saju_core.services.errors import CalculationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolarTermInfo:
    """절기 정보"""
    name: str           # 절기 이름
    longitude: int      # 태양 황경 (도)
    month_ji_idx: int   # 시작되는 월지 (실제 지지 인덱스)
    approx_month: int   # 대략적인 양력 월
    approx_day: int     # 대략적인 양력 일


# 월주는 "절"만 사용 (중기 제외)
# 월지: 寅=입춘~경칩, 卯=경칩~청명, ... 丑=소한~입춘
SOLAR_TERMS_ENTRY = [
    SolarTermInfo("입춘", 315, 2, 2, 4),
    SolarTermInfo("경칩", 345, 3, 3, 6),
    SolarTermInfo("청명", 15, 4, 4, 5),
    SolarTermInfo("입하", 45, 5, 5, 6),
    SolarTermInfo("망종", 75, 6, 6, 6),
    SolarTermInfo("소서", 105, 7, 7, 7),
    SolarTermInfo("입추", 135, 8, 8, 8),
    SolarTermInfo("백로", 165, 9, 9, 8),
    SolarTermInfo("한로", 195, 10, 10, 8),
    SolarTermInfo("입동", 225, 11, 11, 7),
    SolarTermInfo("대설", 255, 0, 12, 7),
    SolarTermInfo("소한", 285, 1, 1, 6),
]

SOLAR_TERM_BY_NAME = {t.name: t for t in SOLAR_TERMS_ENTRY}

IPCHUN_LONGITUDE = 315


def _wrap180(deg: float) -> float:
    return (deg + 180.0) % 360.0 - 180.0


def solar_longitude(dt_utc: datetime) -> float:
    """태양 시황경 (도, 0~360) - 날짜의 춘분점 기준"""
    d = ephem.Date(dt_utc)
    sun = ephem.Sun(d)
    eq = ephem.Equatorial(sun.ra, sun.dec, epoch=d)
    ec = ephem.Ecliptic(eq)
    return math.degrees(float(ec.lon)) % 360


def month_ji_from_longitude(longitude: float) -> int:
    """태양 황경 → 월지 인덱스 (입춘 315° = 寅)"""
    offset = (longitude - IPCHUN_LONGITUDE) % 360
    return (2 + int(offset // 30)) % 12


class SolarTermsEngine:
    """
    절기 엔진
    - 태양 황경 → 월지
    - 절 경계 근접 여부
    - 절입 시각 (UTC) 역산
    """

    def __init__(self, boundary_threshold_deg: float = 1.5):
        self.boundary_threshold_deg = boundary_threshold_deg

    def month_ji_index(self, dt_utc: datetime) -> Tuple[int, float]:
        """(월지 인덱스, 태양 황경)"""
        lon = solar_longitude(dt_utc)
        return month_ji_from_longitude(lon), lon

    def boundary_check(self, dt_utc: datetime) -> Tuple[bool, Optional[str]]:
        """
        절 경계 근처인지 확인

        Returns:
            (경계여부, 경계사유) - "near_ipchun" | "near_term_change" | None
        """
        lon = solar_longitude(dt_utc)
        for term in SOLAR_TERMS_ENTRY:
            if abs(_wrap180(lon - term.longitude)) <= self.boundary_threshold_deg:
                if term.longitude == IPCHUN_LONGITUDE:
                    return True, "near_ipchun"
                return True, "near_term_change"
        return False, None

    def find_term_instant(self, year: int, name: str) -> datetime:
        """
        절입 시각 (UTC, naive) 역산

        대략 날짜 ±7일 구간을 6시간 간격으로 훑어 부호가 바뀌는 구간을 찾고
        이분법으로 초 단위까지 좁힌다.
        """
        term = SOLAR_TERM_BY_NAME.get(name)
        if term is None:
            raise CalculationError(f"Unknown solar term: {name}")

        approx = datetime(year, term.approx_month, term.approx_day, 0, 0)

        def f(dt: datetime) -> float:
            return _wrap180(solar_longitude(dt) - term.longitude)

        lo = approx - timedelta(days=7)
        end = approx + timedelta(days=7)
        step = timedelta(hours=6)
        f_lo = f(lo)
        hi = None
        while lo < end:
            nxt = lo + step
            f_nxt = f(nxt)
            if f_lo <= 0 <= f_nxt:
                hi = nxt
                break
            lo, f_lo = nxt, f_nxt

        if hi is None:
            raise CalculationError(f"Solar term {name} not bracketed near {approx:%Y-%m-%d}")

        while (hi - lo) > timedelta(seconds=1):
            mid = lo + (hi - lo) / 2
            if f(mid) < 0:
                lo = mid
            else:
                hi = mid

        instant = (lo + (hi - lo) / 2).replace(microsecond=0)
        logger.debug(f"[SolarTerms] {year} {name} = {instant:%Y-%m-%d %H:%M:%S} UTC")
        return instant


# 싱글톤
solar_terms_engine = SolarTermsEngine()
