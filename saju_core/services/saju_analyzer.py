# saju_core/services/saju_analyzer.py
"""
오행 분포 분석 모듈
- 8글자(천간 4 + 지지 4) 오행 집계 → 백분율 (합계 정확히 100)
- 음양 비율 (천간 4글자만)
- 일간(Day Master) 오행, 최강/최약 오행
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Any, List, Mapping
import logging

from saju_core.services.calc_module import FourPillars
from saju_core.services.ganji import ELEMENTS

logger = logging.getLogger(__name__)

CHARACTER_COUNT = 8
STEM_COUNT = 4


@dataclass(frozen=True)
class ElementAnalysis:
    """오행 분석 결과 (읽기 전용, 분포 필드는 MappingProxyType)"""
    balance: Mapping[str, int]
    counts: Mapping[str, int]
    yin_yang: Mapping[str, int]
    day_master: str
    day_master_hanja: str
    dominant: str
    weakest: str

    def __post_init__(self):
        for name in ("balance", "counts", "yin_yang"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def __hash__(self):
        return hash((
            tuple(sorted(self.balance.items())),
            tuple(sorted(self.counts.items())),
            tuple(sorted(self.yin_yang.items())),
            self.day_master,
            self.day_master_hanja,
            self.dominant,
            self.weakest,
        ))

    def vector(self) -> List[int]:
        """고정 순서 (목화토금수) 백분율 벡터"""
        return [self.balance[e] for e in ELEMENTS]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balance": dict(self.balance),
            "counts": dict(self.counts),
            "yin_yang": dict(self.yin_yang),
            "day_master": self.day_master,
            "day_master_hanja": self.day_master_hanja,
            "dominant": self.dominant,
            "weakest": self.weakest,
        }


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def count_elements(pillars: FourPillars) -> Dict[str, int]:
    """천간 4 + 지지 4 오행 개수 (고정 순서)"""
    counts = {e: 0 for e in ELEMENTS}
    for pillar in (pillars.year, pillars.month, pillars.day, pillars.hour):
        counts[pillar.stem_element] += 1
        counts[pillar.branch_element] += 1
    return counts


def _pick(counts: Dict[str, int], highest: bool) -> str:
    """최대/최소 개수 오행 (동점이면 목화토금수 순서상 먼저)"""
    best = ELEMENTS[0]
    for element in ELEMENTS[1:]:
        if highest and counts[element] > counts[best]:
            best = element
        elif not highest and counts[element] < counts[best]:
            best = element
    return best


def element_balance(counts: Dict[str, int]) -> Dict[str, int]:
    """
    개수 → 백분율

    반올림 후 합계가 100이 아니면 그 차이를 개수가 가장 많은 오행 하나에 더한다.
    """
    total = sum(counts.values())
    if total == 0:
        return {e: 0 for e in ELEMENTS}

    balance = {e: _round_half_up(counts[e] * 100, total) for e in ELEMENTS}
    remainder = 100 - sum(balance.values())
    if remainder:
        balance[_pick(counts, highest=True)] += remainder
    return balance


def yin_yang_ratio(pillars: FourPillars) -> Dict[str, int]:
    """천간 4글자 기준 음양 비율 (지지는 제외)"""
    stems = (pillars.year, pillars.month, pillars.day, pillars.hour)
    yang = sum(1 for p in stems if p.stem_polarity == "yang")
    yang_pct = _round_half_up(yang * 100, STEM_COUNT)
    return {"yang": yang_pct, "yin": 100 - yang_pct}


class SajuAnalyzer:
    """오행/음양 분석기 (순수 함수 래퍼)"""

    def analyze(self, pillars: FourPillars) -> ElementAnalysis:
        counts = count_elements(pillars)
        analysis = ElementAnalysis(
            balance=element_balance(counts),
            counts=counts,
            yin_yang=yin_yang_ratio(pillars),
            day_master=pillars.day.stem_element,
            day_master_hanja=pillars.day.stem,
            dominant=_pick(counts, highest=True),
            weakest=_pick(counts, highest=False),
        )
        logger.debug(f"[Analyzer] {pillars.day.full} balance={analysis.balance}")
        return analysis


saju_analyzer = SajuAnalyzer()


def analyze(pillars: FourPillars) -> ElementAnalysis:
    return saju_analyzer.analyze(pillars)
