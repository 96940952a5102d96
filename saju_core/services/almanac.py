"""
만세력 오라클 (Almanac)

우선순위 (연도 구간으로 선택):
1. lunar_python 정밀 만세력 - 현대 구간 (기본 1950~2050)
2. ephem 천문 계산 - 구간 밖 Fallback

특징:
- 두 백엔드는 같은 인터페이스(AlmanacOracle.lookup)로 교체 가능
- 입춘/절입 시각 정밀 반영 (연주/월주)
- 일주는 자정 기준, 시주는 23시 자시 기준 (23시에도 일주는 그대로)
- 두 백엔드는 겹치는 구간에서 같은 간지를 낸다
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Type

from lunar_python import Solar

from saju_core.config import get_settings
from saju_core.services.errors import CalculationError
from saju_core.services.ganji import ganji_calc, CHEONGAN_HANJA, JIJI_HANJA, SIXTY_GANJI
from saju_core.services.solar_terms import solar_terms_engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlmanacReading:
    """만세력 조회 결과 (간지 문자열 그대로)"""
    year: str
    month: str
    day: str
    hour: str
    source: str


def _ganji_hanja(gan_idx: int, ji_idx: int) -> str:
    return f"{CHEONGAN_HANJA[gan_idx]}{JIJI_HANJA[ji_idx]}"


class AlmanacOracle(ABC):
    """
    만세력 오라클 인터페이스

    고정 타임존의 양력 시각을 받아 이미 절기 보정된 4주 간지 문자열을 돌려준다.
    날짜 유효성(2월 30일 등)은 오라클이 판단한다.
    """

    name = "abstract"

    def __init__(self, utc_offset_hours: Optional[int] = None):
        if utc_offset_hours is None:
            utc_offset_hours = get_settings().utc_offset_hours
        self.utc_offset_hours = utc_offset_hours

    @abstractmethod
    def lookup(self, year: int, month: int, day: int, hour: int, minute: int) -> AlmanacReading:
        ...

    @staticmethod
    def _civil_datetime(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
        try:
            return datetime(year, month, day, hour, minute)
        except ValueError as e:
            raise CalculationError(f"invalid civil date {year}-{month:02d}-{day:02d} {hour:02d}:{minute:02d}: {e}") from e


class LunarAlmanac(AlmanacOracle):
    """
    lunar_python 기반 정밀 만세력

    lunar_python의 절기표는 중국 표준시(UTC+8) 기준이므로
    연주/월주는 시각을 UTC+8로 옮겨 조회하고,
    일주/시주는 벽시계(양력 날짜/시각) 그대로 조회한다.
    """

    name = "lunar_python"
    NATIVE_UTC_OFFSET_HOURS = 8

    def _eight_char(self, dt: datetime):
        solar = Solar.fromYmdHms(dt.year, dt.month, dt.day, dt.hour, dt.minute, 0)
        eight_char = solar.getLunar().getEightChar()
        # sect 2: 야자시(23시)에도 일주는 당일 유지
        eight_char.setSect(2)
        return eight_char

    def lookup(self, year: int, month: int, day: int, hour: int, minute: int) -> AlmanacReading:
        civil = self._civil_datetime(year, month, day, hour, minute)
        native = civil - timedelta(hours=self.utc_offset_hours - self.NATIVE_UTC_OFFSET_HOURS)

        try:
            term_chart = self._eight_char(native)
            civil_chart = term_chart if native == civil else self._eight_char(civil)
            return AlmanacReading(
                year=term_chart.getYear(),
                month=term_chart.getMonth(),
                day=civil_chart.getDay(),
                hour=civil_chart.getTime(),
                source=self.name,
            )
        except Exception as e:
            logger.error(f"[Almanac] lunar_python 실패 {civil:%Y-%m-%d %H:%M}: {e}")
            raise CalculationError(f"lunar_python 계산 실패: {e}") from e


class EphemAlmanac(AlmanacOracle):
    """
    ephem 기반 천문 계산 (Fallback)

    - 월지: 태양 시황경 (입춘 315°부터 30°씩)
    - 연주: 1~2월이고 아직 子/丑월이면 전년도
    - 일주: 2000-01-01 무오일 Anchor
    - 시주: 23시는 다음 날 일간으로 자시 천간을 잡는다
    """

    name = "ephem"

    def lookup(self, year: int, month: int, day: int, hour: int, minute: int) -> AlmanacReading:
        civil = self._civil_datetime(year, month, day, hour, minute)
        dt_utc = civil - timedelta(hours=self.utc_offset_hours)

        try:
            month_ji_idx, solar_lon = solar_terms_engine.month_ji_index(dt_utc)
        except Exception as e:
            logger.error(f"[Almanac] ephem 실패 {civil:%Y-%m-%d %H:%M}: {e}")
            raise CalculationError(f"ephem 계산 실패: {e}") from e

        # 입춘 보정 연도
        adjusted_year = civil.year
        if civil.month <= 2 and month_ji_idx in (0, 1):
            adjusted_year -= 1

        year_gan, year_ji = ganji_calc.calc_year_ganji(adjusted_year)
        month_gan, month_ji = ganji_calc.calc_month_ganji(year_gan, month_ji_idx)

        day_idx = ganji_calc.calc_day_index(civil.year, civil.month, civil.day)
        zi_day_gan = (day_idx + (1 if civil.hour == 23 else 0)) % 10
        hour_gan, hour_ji = ganji_calc.calc_hour_ganji(zi_day_gan, civil.hour)

        logger.debug(f"[Almanac] ephem {civil:%Y-%m-%d %H:%M} 황경={solar_lon:.3f}")

        return AlmanacReading(
            year=_ganji_hanja(year_gan, year_ji),
            month=_ganji_hanja(month_gan, month_ji),
            day=SIXTY_GANJI[day_idx],
            hour=_ganji_hanja(hour_gan, hour_ji),
            source=self.name,
        )


class AlmanacRouter(AlmanacOracle):
    """
    연도 구간별 백엔드 선택 (정밀 구간 → lunar_python, 그 외 → ephem)
    """

    name = "router"

    def __init__(
        self,
        precise: Optional[AlmanacOracle] = None,
        fallback: Optional[AlmanacOracle] = None,
        precise_year_min: Optional[int] = None,
        precise_year_max: Optional[int] = None,
    ):
        settings = get_settings()
        super().__init__(settings.utc_offset_hours)
        self.precise = precise or LunarAlmanac(settings.utc_offset_hours)
        self.fallback = fallback or EphemAlmanac(settings.utc_offset_hours)
        self.precise_year_min = settings.precise_year_min if precise_year_min is None else precise_year_min
        self.precise_year_max = settings.precise_year_max if precise_year_max is None else precise_year_max

    def backend_for(self, year: int) -> AlmanacOracle:
        if self.precise_year_min <= year <= self.precise_year_max:
            return self.precise
        return self.fallback

    def lookup(self, year: int, month: int, day: int, hour: int, minute: int) -> AlmanacReading:
        backend = self.backend_for(year)
        logger.debug(f"[Almanac] {year} → {backend.name}")
        return backend.lookup(year, month, day, hour, minute)


ALMANAC_BACKENDS: Dict[str, Type[AlmanacOracle]] = {
    LunarAlmanac.name: LunarAlmanac,
    EphemAlmanac.name: EphemAlmanac,
}


def get_almanac(name: Optional[str] = None) -> AlmanacOracle:
    """이름으로 백엔드 생성 (None이면 구간 라우터)"""
    if name is None:
        return AlmanacRouter()
    try:
        return ALMANAC_BACKENDS[name]()
    except KeyError:
        raise CalculationError(f"Unknown almanac backend: {name}") from None
