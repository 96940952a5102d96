"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
1️⃣ CALC 모듈 - 사주 8글자 계산
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 입력 범위 검증 (필드별 InputValidationError, 절대 clamp 하지 않음)
- 만세력 오라클 조회 → 간지 문자열 파싱 → Pillar
- 타임존은 Settings 고정값 (Asia/Seoul)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Dict, Any, Optional, Tuple

from saju_core.config import get_settings
from saju_core.services.almanac import AlmanacOracle, AlmanacRouter
from saju_core.services.cache import CacheService, cache_service
from saju_core.services.errors import InputValidationError
from saju_core.services.ganji import Pillar, parse_pillar
from saju_core.services.solar_terms import SolarTermsEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SajuInput:
    """양력 출생 시각 (고정 타임존)"""
    year: int
    month: int
    day: int
    hour: int
    minute: int


@dataclass(frozen=True)
class FourPillars:
    """사주 8글자 (4기둥)"""
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year.to_dict(),
            "month": self.month.to_dict(),
            "day": self.day.to_dict(),
            "hour": self.hour.to_dict(),
        }


@dataclass(frozen=True)
class SajuResult:
    """계산 결과 (입력 에코 + 4주 + 품질 정보)"""
    input: SajuInput
    pillars: FourPillars
    source: str
    solar_term_boundary: bool = False
    boundary_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input": asdict(self.input),
            "pillars": self.pillars.to_dict(),
            "source": self.source,
            "solar_term_boundary": self.solar_term_boundary,
            "boundary_reason": self.boundary_reason,
        }


def _check_field(field: str, value: Any, low: int, high: int) -> None:
    # bool은 int 하위 클래스라 명시적으로 거부
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputValidationError(field, f"must be an integer, got {value!r}")
    if value < low or value > high:
        raise InputValidationError(field, f"must be {low}-{high}, got {value}")


class CalcModule:
    """
    사주 8글자 계산 모듈
    - 년/월/일/시주: 만세력 오라클 (구간별 lunar_python / ephem)
    - 23시~23시59분: 자시이지만 일주는 당일 (자정에만 일주 변경)
    """

    def __init__(self, almanac: Optional[AlmanacOracle] = None, cache: Optional[CacheService] = None):
        settings = get_settings()
        if almanac is None:
            self.almanac = AlmanacRouter()
            self.cache = cache or cache_service
        else:
            # 주입된 백엔드는 전용 캐시
            self.almanac = almanac
            self.cache = cache or CacheService()
        self.min_year = settings.min_year
        self.max_year = settings.max_year
        self.utc_offset_hours = settings.utc_offset_hours
        self.terms = SolarTermsEngine(settings.boundary_threshold_deg)

    def validate(self, year: int, month: int, day: int, hour: int, minute: int) -> SajuInput:
        """입력 범위 검증 (year → month → day → hour → minute 순)"""
        _check_field("year", year, self.min_year, self.max_year)
        _check_field("month", month, 1, 12)
        _check_field("day", day, 1, 31)
        _check_field("hour", hour, 0, 23)
        _check_field("minute", minute, 0, 59)
        return SajuInput(year, month, day, hour, minute)

    def resolve(self, year: int, month: int, day: int, hour: int, minute: int) -> FourPillars:
        pillars, _ = self._resolve(self.validate(year, month, day, hour, minute))
        return pillars

    def calculate(self, year: int, month: int, day: int, hour: int, minute: int) -> SajuResult:
        saju_input = self.validate(year, month, day, hour, minute)
        pillars, source = self._resolve(saju_input)

        dt_utc = datetime(year, month, day, hour, minute) - timedelta(hours=self.utc_offset_hours)
        is_boundary, boundary_reason = self.terms.boundary_check(dt_utc)

        logger.info(
            f"[CalcModule] {year}-{month:02d}-{day:02d} {hour:02d}:{minute:02d} → "
            f"{pillars.year.full} {pillars.month.full} {pillars.day.full} {pillars.hour.full} | source={source}"
        )
        return SajuResult(
            input=saju_input,
            pillars=pillars,
            source=source,
            solar_term_boundary=is_boundary,
            boundary_reason=boundary_reason,
        )

    def _resolve(self, saju_input: SajuInput) -> Tuple[FourPillars, str]:
        key = (
            self.almanac.name,
            saju_input.year, saju_input.month, saju_input.day, saju_input.hour, saju_input.minute,
        )
        cached = self.cache.get_chart(key)
        if cached is not None:
            return cached

        reading = self.almanac.lookup(
            saju_input.year, saju_input.month, saju_input.day, saju_input.hour, saju_input.minute
        )
        pillars = FourPillars(
            year=parse_pillar(reading.year),
            month=parse_pillar(reading.month),
            day=parse_pillar(reading.day),
            hour=parse_pillar(reading.hour),
        )
        self.cache.set_chart(key, (pillars, reading.source))
        return pillars, reading.source


calc_module = CalcModule()


def resolve(year: int, month: int, day: int, hour: int, minute: int) -> FourPillars:
    """양력 시각 → 4주"""
    return calc_module.resolve(year, month, day, hour, minute)


def calculate(year: int, month: int, day: int, hour: int, minute: int) -> SajuResult:
    """양력 시각 → 4주 + 입력 에코 + 백엔드/경계 정보"""
    return calc_module.calculate(year, month, day, hour, minute)
