"""
사주 계산 엔진 (API 래퍼)
- calc_module (만세력 오라클 → 4주) + saju_analyzer (오행 분석)
- API 응답 형식에 맞게 변환
"""
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from saju_core.models.schemas import (
    PillarOut,
    FourPillarsOut,
    ElementAnalysisOut,
    QualityInfo,
    CalculateResponse,
    CompatibilityResponse,
)
from saju_core.services.calc_module import CalcModule, SajuResult, calc_module
from saju_core.services.ganji import Pillar, element_label, get_hour_options
from saju_core.services.match_module import CompatibilityResult, match_module
from saju_core.services.saju_analyzer import ElementAnalysis, saju_analyzer
from saju_core.config import get_settings

logger = logging.getLogger(__name__)


DAY_MASTER_DESC = {
    "甲": "큰 나무(甲木) - 곧고 뻗어나가는 성장의 기운",
    "乙": "작은 나무(乙木) - 유연하고 적응력 있는 기운",
    "丙": "태양(丙火) - 밝고 뜨거운 열정의 기운",
    "丁": "촛불(丁火) - 따뜻하고 은은한 빛의 기운",
    "戊": "큰 산(戊土) - 안정적이고 묵직한 기운",
    "己": "논밭(己土) - 포용하고 키워내는 기운",
    "庚": "바위/쇠(庚金) - 강하고 결단력 있는 기운",
    "辛": "보석(辛金) - 섬세하고 빛나는 기운",
    "壬": "큰 물(壬水) - 넓고 깊은 지혜의 기운",
    "癸": "이슬/비(癸水) - 촉촉하고 스며드는 기운",
}


@dataclass(frozen=True)
class CalculationResult:
    """계산 결과 (4주 + 오행 분석)"""
    saju: SajuResult
    analysis: ElementAnalysis
    day_master_description: str


class SajuEngine:
    """
    사주 계산 엔진 (API 래퍼)
    """

    def __init__(self, calc: Optional[CalcModule] = None):
        self.calc = calc or calc_module

    def calculate(self, year: int, month: int, day: int, hour: int, minute: int) -> CalculationResult:
        saju = self.calc.calculate(year, month, day, hour, minute)
        analysis = saju_analyzer.analyze(saju.pillars)
        return CalculationResult(
            saju=saju,
            analysis=analysis,
            day_master_description=DAY_MASTER_DESC[saju.pillars.day.stem],
        )

    def compatibility(self, me: Dict[str, int], partner: Dict[str, int]) -> CompatibilityResult:
        """두 사람 출생 시각 → 궁합"""
        mine = self.calc.resolve(**me)
        theirs = self.calc.resolve(**partner)
        return match_module.score(mine, theirs)

    def to_response(self, result: CalculationResult) -> CalculateResponse:
        """CalculationResult → CalculateResponse 변환"""
        saju = result.saju
        pillars = saju.pillars
        return CalculateResponse(
            input=saju.to_dict()["input"],
            pillars=FourPillarsOut(
                year=self._to_pillar(pillars.year),
                month=self._to_pillar(pillars.month),
                day=self._to_pillar(pillars.day),
                hour=self._to_pillar(pillars.hour),
            ),
            analysis=ElementAnalysisOut(**result.analysis.to_dict()),
            day_master_description=result.day_master_description,
            day_master_label=element_label(result.analysis.day_master),
            quality=QualityInfo(
                solar_term_boundary=saju.solar_term_boundary,
                boundary_reason=saju.boundary_reason,
                timezone=get_settings().timezone_name,
                calculation_method=saju.source,
            ),
        )

    @staticmethod
    def to_compatibility_response(result: CompatibilityResult) -> CompatibilityResponse:
        return CompatibilityResponse(**result.to_dict())

    @staticmethod
    def _to_pillar(pillar: Pillar) -> PillarOut:
        return PillarOut(**pillar.to_dict())

    @staticmethod
    def get_hour_options() -> List[Dict[str, Any]]:
        """시간대 선택 옵션"""
        return get_hour_options()


# 싱글톤 인스턴스
saju_engine = SajuEngine()
