"""
사주 계산 테스트 - 골든 케이스 / 절기 경계 / 야자시 / 입력 검증
"""
import pytest
from datetime import timedelta

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_core.services.almanac import (
    AlmanacOracle,
    AlmanacReading,
    AlmanacRouter,
    EphemAlmanac,
    LunarAlmanac,
    get_almanac,
)
from saju_core.services.calc_module import CalcModule, calc_module
from saju_core.services.errors import CalculationError, InputValidationError
from saju_core.services.ganji import JIJI_HANJA, parse_pillar
from saju_core.services.solar_terms import solar_terms_engine


PRECISE = CalcModule(LunarAlmanac(9))
FALLBACK = CalcModule(EphemAlmanac(9))

BACKENDS = [
    pytest.param(PRECISE, id="lunar_python"),
    pytest.param(FALLBACK, id="ephem"),
]


GOLDEN_CASES = [
    {
        "input": (1978, 5, 16, 11, 0),
        "expected": ("戊午", "丁巳", "戊寅", "戊午"),
        "desc": "검증 기준 케이스",
    },
    {
        "input": (2000, 1, 1, 12, 0),
        "expected": ("己卯", "丙子", "戊午", "戊午"),
        "desc": "일주 Anchor (2000-01-01 = 무오일), 소한 전 자월",
    },
    {
        "input": (2024, 2, 4, 18, 0),
        "expected": ("甲辰", "丙寅", "戊戌", "辛酉"),
        "desc": "2024 입춘 직후",
    },
    {
        "input": (1990, 5, 15, 23, 0),
        "expected": ("庚午", "辛巳", "庚辰", "戊子"),
        "desc": "야자시: 일주는 당일, 시간은 다음 날 자시",
    },
]


class TestGoldenCases:
    """골든 케이스 (두 백엔드 모두)"""

    @pytest.mark.parametrize("calc", BACKENDS)
    @pytest.mark.parametrize("case", GOLDEN_CASES, ids=lambda c: c["desc"])
    def test_golden(self, calc, case):
        pillars = calc.resolve(*case["input"])
        got = (pillars.year.full, pillars.month.full, pillars.day.full, pillars.hour.full)
        assert got == case["expected"], f"{case['desc']}: expected {case['expected']}, got {got}"

    def test_fallback_range_1949(self):
        """정밀 구간 밖 (1949) → ephem: 1949-10-01 = 갑자일"""
        result = calc_module.calculate(1949, 10, 1, 15, 0)
        assert result.source == "ephem"
        pillars = result.pillars
        assert (pillars.year.full, pillars.month.full, pillars.day.full, pillars.hour.full) == \
            ("己丑", "癸酉", "甲子", "壬申")

    def test_fallback_range_1900_first_minute(self):
        """입력 하한 1900-01-01 00:00 → 전년도(己亥) 자월"""
        pillars = calc_module.resolve(1900, 1, 1, 0, 0)
        assert (pillars.year.full, pillars.month.full, pillars.day.full, pillars.hour.full) == \
            ("己亥", "丙子", "甲戌", "甲子")

    def test_korean_rendering(self):
        """한글 표기 (fullKr)"""
        pillars = calc_module.resolve(2024, 2, 4, 18, 0)
        assert pillars.year.full_kr == "갑진"
        assert pillars.month.full_kr == "병인"
        assert pillars.day.full_kr == "무술"
        assert pillars.hour.full_kr == "신유"
        assert pillars.day.stem == "戊" and pillars.day.stem_kr == "무"
        assert pillars.day.branch == "戌" and pillars.day.branch_kr == "술"


class TestIpchunBoundary:
    """입춘 경계 (연주 전환)"""

    def test_2024_before_and_after(self):
        """2024 입춘 17:26:53 KST"""
        assert PRECISE.resolve(2024, 2, 4, 10, 0).year.full == "癸卯"
        assert PRECISE.resolve(2024, 2, 4, 17, 26).year.full == "癸卯"
        assert PRECISE.resolve(2024, 2, 4, 17, 28).year.full == "甲辰"
        assert PRECISE.resolve(2024, 2, 4, 18, 0).year.full == "甲辰"

    def test_2024_month_changes_with_year(self):
        before = PRECISE.resolve(2024, 2, 4, 17, 26)
        after = PRECISE.resolve(2024, 2, 4, 17, 28)
        assert before.month.full == "乙丑"
        assert after.month.full == "丙寅"

    def test_2025_late_evening_ipchun(self):
        """2025 입춘 23:10 KST (같은 날 밤)"""
        assert PRECISE.resolve(2025, 2, 3, 22, 0).year.full == "甲辰"
        assert PRECISE.resolve(2025, 2, 3, 23, 9).year.full == "甲辰"
        assert PRECISE.resolve(2025, 2, 3, 23, 11).year.full == "乙巳"
        assert PRECISE.resolve(2025, 2, 3, 23, 30).year.full == "乙巳"

    def test_january_is_previous_year(self):
        """1월 1일은 입춘 전 → 전년도"""
        assert calc_module.resolve(2025, 1, 1, 12, 0).year.full == "甲辰"

    def test_ephem_minute_around_computed_instant(self):
        """ephem이 역산한 절입 시각 1분 전/후"""
        instant_utc = solar_terms_engine.find_term_instant(2024, "입춘")
        local = instant_utc + timedelta(hours=9)
        assert local.date().isoformat() == "2024-02-04"

        floor = local.replace(second=0, microsecond=0)
        before = floor - timedelta(minutes=1)
        after = floor + timedelta(minutes=1)

        p_before = FALLBACK.resolve(before.year, before.month, before.day, before.hour, before.minute)
        p_after = FALLBACK.resolve(after.year, after.month, after.day, after.hour, after.minute)
        assert p_before.year.full == "癸卯"
        assert p_after.year.full == "甲辰"
        assert p_before.month.branch == "丑"
        assert p_after.month.branch == "寅"

    def test_computed_instant_matches_published_time(self):
        """2024 입춘 = 2024-02-04 17:26:53 KST (±2분)"""
        local = solar_terms_engine.find_term_instant(2024, "입춘") + timedelta(hours=9)
        published = local.replace(hour=17, minute=26, second=53)
        assert abs((local - published).total_seconds()) <= 120


class TestMonthBoundary:
    """월주 (절입 기준)"""

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_sohan(self, calc):
        """소한(2025-01-05 17:33 KST) 전후: 자월 → 축월"""
        assert calc.resolve(2025, 1, 3, 12, 0).month.branch_kr == "자"
        assert calc.resolve(2025, 1, 10, 12, 0).month.branch_kr == "축"

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_month_branch_sequence(self, calc):
        """매월 20일 → 묘월(3월)부터 순서대로"""
        branches = [calc.resolve(2010, m, 20, 12, 0).month.branch for m in range(3, 13)]
        assert branches == ["卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥", "子"]


class TestHourBranch:
    """야자시 (子時 23:00-01:00)"""

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_2300_is_zi(self, calc):
        assert calc.resolve(1990, 5, 15, 23, 0).hour.branch == "子"

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_2259_is_hai(self, calc):
        assert calc.resolve(1990, 5, 15, 22, 59).hour.branch == "亥"

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_hour_branch_flips_before_day_pillar(self, calc):
        """22:59 → 23:00: 시지 변경, 일주 유지"""
        p_2259 = calc.resolve(1990, 5, 15, 22, 59)
        p_2300 = calc.resolve(1990, 5, 15, 23, 0)
        assert p_2259.hour.branch != p_2300.hour.branch
        assert p_2259.day == p_2300.day

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_day_pillar_flips_at_midnight(self, calc):
        """23:00 → 다음 날 00:30: 시지 동일, 일주 변경"""
        p_2300 = calc.resolve(1990, 5, 15, 23, 0)
        p_0030 = calc.resolve(1990, 5, 16, 0, 30)
        assert p_0030.hour.branch == "子"
        assert p_2300.hour.branch == p_0030.hour.branch
        assert p_2300.day != p_0030.day
        assert p_2300.day.full == "庚辰"
        assert p_0030.day.full == "辛巳"

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_twelve_branches_in_order(self, calc):
        """2000-06-15 2시간 간격 → 12지지 순서대로"""
        branches = [calc.resolve(2000, 6, 15, hour, 0).hour.branch for hour in range(0, 24, 2)]
        assert branches == JIJI_HANJA


class TestBackendEquivalence:
    """lunar_python vs ephem (겹치는 구간, 절입 시각에서 먼 시점)"""

    SAMPLES = [
        (year, month, 20, hour, minute)
        for year in (1950, 1966, 1984, 1999, 2012, 2033, 2050)
        for month in (1, 2, 6, 11)
        for hour, minute in ((0, 0), (11, 45), (23, 0), (23, 59))
    ]

    @pytest.mark.parametrize("ts", SAMPLES, ids=lambda t: "%04d-%02d-%02d_%02d%02d" % t)
    def test_same_pillars(self, ts):
        assert PRECISE.resolve(*ts) == FALLBACK.resolve(*ts)


class TestDeterminism:
    """동일 입력 → 동일 결과"""

    @pytest.mark.parametrize("ts", [(1955, 3, 7, 4, 4), (2024, 2, 4, 17, 28), (1920, 8, 8, 23, 30)])
    def test_idempotent(self, ts):
        first = calc_module.calculate(*ts)
        second = calc_module.calculate(*ts)
        assert first == second
        assert first.pillars.to_dict() == second.pillars.to_dict()


class TestAlmanacRouter:
    """연도 구간별 백엔드 선택"""

    def test_backend_for_year(self):
        router = AlmanacRouter(precise_year_min=1950, precise_year_max=2050)
        assert router.backend_for(1949).name == "ephem"
        assert router.backend_for(1950).name == "lunar_python"
        assert router.backend_for(2050).name == "lunar_python"
        assert router.backend_for(2051).name == "ephem"

    def test_source_is_reported(self):
        assert calc_module.calculate(1990, 6, 15, 12, 0).source == "lunar_python"
        assert calc_module.calculate(2080, 6, 15, 12, 0).source == "ephem"

    def test_get_almanac_by_name(self):
        assert isinstance(get_almanac("ephem"), EphemAlmanac)
        assert isinstance(get_almanac("lunar_python"), LunarAlmanac)
        assert isinstance(get_almanac(), AlmanacRouter)
        with pytest.raises(CalculationError):
            get_almanac("kasi")

    def test_boundary_quality_flag(self):
        near = calc_module.calculate(2024, 2, 4, 12, 0)
        assert near.solar_term_boundary is True
        assert near.boundary_reason == "near_ipchun"

        far = calc_module.calculate(2024, 6, 20, 12, 0)
        assert far.solar_term_boundary is False
        assert far.boundary_reason is None


class _BrokenAlmanac(AlmanacOracle):
    name = "broken"

    def __init__(self, text):
        super().__init__(9)
        self.text = text

    def lookup(self, year, month, day, hour, minute):
        return AlmanacReading(year="甲子", month=self.text, day="甲子", hour="甲子", source=self.name)


class TestBackendErrors:
    """만세력 응답 이상 → CalculationError"""

    @pytest.mark.parametrize("text", ["", "甲", "甲子丙", "XY", "甲丑", None])
    def test_malformed_pillar_string(self, text):
        calc = CalcModule(_BrokenAlmanac(text))
        with pytest.raises(CalculationError):
            calc.resolve(2000, 1, 1, 0, 0)

    @pytest.mark.parametrize("calc", BACKENDS)
    def test_impossible_date_is_backend_error(self, calc):
        """2월 30일은 범위 검증은 통과, 만세력에서 실패"""
        with pytest.raises(CalculationError):
            calc.resolve(2023, 2, 30, 12, 0)

    def test_parse_pillar_accepts_both_scripts(self):
        assert parse_pillar("甲子") == parse_pillar("갑자")
        assert parse_pillar(" 癸亥 ").full_kr == "계해"


class TestInputValidation:
    """입력 검증 (clamp 금지)"""

    @pytest.mark.parametrize("args,field", [
        ((1800, 1, 1, 0, 0), "year"),
        ((1899, 12, 31, 23, 59), "year"),
        ((2101, 1, 1, 0, 0), "year"),
        ((2000, 0, 1, 0, 0), "month"),
        ((2000, 13, 1, 0, 0), "month"),
        ((2000, 1, 0, 0, 0), "day"),
        ((2000, 1, 32, 0, 0), "day"),
        ((2000, 1, 1, -1, 0), "hour"),
        ((2000, 1, 1, 24, 0), "hour"),
        ((2000, 1, 1, 25, 0), "hour"),
        ((2000, 1, 1, 0, -1), "minute"),
        ((2000, 1, 1, 0, 60), "minute"),
        ((2000, 1, 1, 12.5, 0), "hour"),
        ((2000, True, 1, 0, 0), "month"),
    ])
    def test_out_of_range(self, args, field):
        with pytest.raises(InputValidationError) as exc_info:
            calc_module.resolve(*args)
        assert exc_info.value.field == field

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            calc_module.resolve(1800, 1, 1, 0, 0)

    def test_first_violated_field_wins(self):
        with pytest.raises(InputValidationError) as exc_info:
            calc_module.resolve(1800, 13, 1, 25, 0)
        assert exc_info.value.field == "year"

    def test_edges_accepted(self):
        calc_module.resolve(2100, 12, 31, 23, 59)
        calc_module.resolve(1900, 1, 1, 0, 0)


class TestChartCache:
    """계산 결과 캐시"""

    def test_second_lookup_hits_cache(self):
        calc = CalcModule(EphemAlmanac(9))
        first = calc.resolve(2011, 7, 7, 7, 7)
        second = calc.resolve(2011, 7, 7, 7, 7)
        assert first == second
        stats = calc.cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["chart_cache_size"] == 1

    def test_failed_reading_is_not_cached(self):
        calc = CalcModule(_BrokenAlmanac("XY"))
        for _ in range(2):
            with pytest.raises(CalculationError):
                calc.resolve(2000, 1, 1, 0, 0)
        assert calc.cache.get_stats()["chart_cache_size"] == 0

    def test_clear(self):
        calc = CalcModule(EphemAlmanac(9))
        calc.resolve(2011, 7, 7, 7, 7)
        calc.cache.clear()
        assert calc.cache.get_stats() == {
            "hits": 0, "misses": 0, "hit_rate": "0.0%", "chart_cache_size": 0,
        }


class _ArithmeticAlmanac(AlmanacOracle):
    """천문 계산 없이 산술로만 간지를 만드는 빠른 백엔드 (동시성 테스트용)"""
    name = "arithmetic"

    def lookup(self, year, month, day, hour, minute):
        from saju_core.services.ganji import SIXTY_GANJI, ganji_calc

        civil = self._civil_datetime(year, month, day, hour, minute)
        year_gan, year_ji = ganji_calc.calc_year_ganji(civil.year)
        month_gan, month_ji = ganji_calc.calc_month_ganji(year_gan, (civil.month + 1) % 12)
        day_idx = ganji_calc.calc_day_index(civil.year, civil.month, civil.day)
        hour_gan, hour_ji = ganji_calc.calc_hour_ganji(day_idx % 10, civil.hour)
        return AlmanacReading(
            year=SIXTY_GANJI[_sixty_index(year_gan, year_ji)],
            month=SIXTY_GANJI[_sixty_index(month_gan, month_ji)],
            day=SIXTY_GANJI[day_idx],
            hour=SIXTY_GANJI[_sixty_index(hour_gan, hour_ji)],
            source=self.name,
        )


def _sixty_index(gan_idx, ji_idx):
    return next(i for i in range(60) if i % 10 == gan_idx and i % 12 == ji_idx)


def _timestamp(k):
    return (1900 + k % 201, 1 + (k // 201) % 12, 1 + (k // 2412) % 28, k % 24, (k * 7) % 60)


class TestConcurrentResolve:
    """여러 스레드에서 서로 다른 시각을 동시에 계산"""

    WORKERS = 8
    CALLS_PER_WORKER = 2000

    def test_threads_share_small_cache(self):
        from concurrent.futures import ThreadPoolExecutor
        from saju_core.services.cache import CacheService

        shared = CalcModule(_ArithmeticAlmanac(9), cache=CacheService(max_size=32))
        reference = CalcModule(_ArithmeticAlmanac(9), cache=CacheService(max_size=0))

        def work(worker):
            keys = [worker * self.CALLS_PER_WORKER + i for i in range(self.CALLS_PER_WORKER)]
            # 다른 워커와 겹치는 구간도 섞어서 조회
            keys += list(range(200))
            return [(k, shared.resolve(*_timestamp(k))) for k in keys]

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            results = list(pool.map(work, range(self.WORKERS)))

        for worker_results in results:
            for k, pillars in worker_results:
                assert pillars == reference.resolve(*_timestamp(k)), f"mismatch at {_timestamp(k)}"

        stats = shared.cache.get_stats()
        total_calls = self.WORKERS * (self.CALLS_PER_WORKER + 200)
        assert stats["hits"] + stats["misses"] == total_calls
        assert stats["chart_cache_size"] <= 32


class TestCacheSettings:
    """명시적 0 값은 기본값으로 바뀌지 않는다"""

    def test_explicit_zero_kept(self):
        from saju_core.services.cache import CacheService

        cache = CacheService(max_size=0, ttl_seconds=0)
        assert cache.max_size == 0
        assert cache.ttl_seconds == 0

    def test_zero_size_disables_storage(self):
        from saju_core.services.cache import CacheService

        calc = CalcModule(EphemAlmanac(9), cache=CacheService(max_size=0))
        first = calc.resolve(2011, 7, 7, 7, 7)
        assert calc.resolve(2011, 7, 7, 7, 7) == first
        assert calc.cache.get_stats()["chart_cache_size"] == 0
        assert calc.cache.get_stats()["hits"] == 0

    def test_defaults_from_settings(self):
        from saju_core.config import get_settings
        from saju_core.services.cache import CacheService

        cache = CacheService()
        assert cache.max_size == get_settings().cache_max_size
        assert cache.ttl_seconds == get_settings().cache_ttl_seconds
