# -*- coding: utf-8 -*-
"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
3️⃣ MATCH 모듈 - 궁합 점수
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
기본 50점에서 가감 후 0~100으로 clamp
- 일간 상생 인접 +20 / 상극 인접 -10 / 동일 +10
- 오행 분포 코사인 유사도 × 20
- 일간 음양 상보 +10
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import math
import logging
from dataclasses import dataclass, asdict
from datetime import date
from typing import Dict, Any, List, Optional, Sequence, Tuple

from saju_core.services.calc_module import FourPillars, calc_module
from saju_core.services.ganji import ELEMENT_RELATIONS
from saju_core.services.saju_analyzer import saju_analyzer

logger = logging.getLogger(__name__)

BASE_SCORE = 50
GENERATING_BONUS = 20
OVERCOMING_PENALTY = 10
SAME_ELEMENT_BONUS = 10
SIMILARITY_WEIGHT = 20
POLARITY_BONUS = 10

SAME_ELEMENT_LABELS = {
    "wood": "함께 자라는 두 그루의 나무",
    "fire": "서로를 더 뜨겁게 만드는 두 불꽃",
    "earth": "든든하게 받쳐주는 두 대지",
    "metal": "부딪히며 빛나는 두 쇠",
    "water": "하나로 흘러가는 두 물줄기",
}

# 키는 오행 이름 정렬 순
PAIR_LABELS: Dict[Tuple[str, str], str] = {
    ("fire", "wood"): "나무가 불을 살리는 상생 궁합",
    ("earth", "fire"): "불이 흙을 데우는 상생 궁합",
    ("earth", "metal"): "흙이 쇠를 품어 기르는 상생 궁합",
    ("metal", "water"): "쇠가 물을 맑게 하는 상생 궁합",
    ("water", "wood"): "물이 나무를 키우는 상생 궁합",
    ("earth", "wood"): "나무가 흙을 파고드는 긴장 관계",
    ("earth", "water"): "흙이 물길을 막아서는 긴장 관계",
    ("fire", "water"): "물과 불이 맞서는 긴장 관계",
    ("fire", "metal"): "불이 쇠를 단련하는 긴장 관계",
    ("metal", "wood"): "쇠가 나무를 다듬는 긴장 관계",
}

# (하한 점수, 설명) - 높은 점수부터
DESCRIPTION_LADDER: List[Tuple[int, str]] = [
    (90, "말하지 않아도 통하는 천생연분입니다. 서로의 기운이 자연스럽게 채워집니다."),
    (80, "서로를 성장시키는 아주 좋은 궁합입니다."),
    (70, "함께할수록 안정감이 커지는 좋은 궁합입니다."),
    (60, "작은 배려만 더하면 오래 가는 무난한 궁합입니다."),
    (50, "장단점이 고르게 섞인 보통의 궁합입니다."),
    (40, "다른 점이 많지만 대화로 충분히 맞춰갈 수 있습니다."),
    (30, "기운이 엇갈리기 쉬워 서로의 속도를 존중해야 합니다."),
    (20, "부딪히는 일이 잦을 수 있어 거리 조절이 필요합니다."),
    (10, "서로 다른 세계에 사는 두 사람입니다. 이해하려는 노력이 관건입니다."),
    (0, "쉽지 않은 조합이지만, 다름을 배우는 인연이 될 수 있습니다."),
]


@dataclass(frozen=True)
class CompatibilityResult:
    """궁합 결과"""
    score: int
    my_element: str
    partner_element: str
    relationship: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _related(relation: str, a: str, b: str) -> bool:
    """a→b 또는 b→a 방향으로 relation(generates/overcomes) 관계인지"""
    return ELEMENT_RELATIONS[a][relation] == b or ELEMENT_RELATIONS[b][relation] == a


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """코사인 유사도 (크기 0이면 0)"""
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    return dot / (norm_a * norm_b)


def relationship_label(
    a: str,
    b: str,
    pair_labels: Optional[Dict[Tuple[str, str], str]] = None,
) -> str:
    """일간 오행 쌍 → 관계 라벨 (순서 무관)"""
    if pair_labels is None:
        pair_labels = PAIR_LABELS
    if a == b:
        return SAME_ELEMENT_LABELS[a]
    key = tuple(sorted((a, b)))
    label = pair_labels.get(key)
    if label is None:
        return f"{key[0]} meets {key[1]}"
    return label


def describe(score: int) -> str:
    """점수 → 설명 (사다리 위에서부터 첫 번째로 하한 이하인 구간)"""
    for threshold, text in DESCRIPTION_LADDER:
        if threshold <= score:
            return text
    return DESCRIPTION_LADDER[-1][1]


class MatchModule:
    """
    궁합 점수 엔진

    score(a, b)와 score(b, a)는 점수/라벨/설명이 같고 my/partner만 뒤바뀐다.
    """

    def score(self, a: FourPillars, b: FourPillars) -> CompatibilityResult:
        analysis_a = saju_analyzer.analyze(a)
        analysis_b = saju_analyzer.analyze(b)
        dm_a, dm_b = analysis_a.day_master, analysis_b.day_master

        total = BASE_SCORE
        if _related("generates", dm_a, dm_b):
            total += GENERATING_BONUS
        if _related("overcomes", dm_a, dm_b):
            total -= OVERCOMING_PENALTY
        if dm_a == dm_b:
            total += SAME_ELEMENT_BONUS

        similarity = cosine_similarity(analysis_a.vector(), analysis_b.vector())
        total += math.floor(SIMILARITY_WEIGHT * similarity + 0.5)

        if a.day.stem_polarity != b.day.stem_polarity:
            total += POLARITY_BONUS

        total = max(0, min(100, total))

        result = CompatibilityResult(
            score=total,
            my_element=dm_a,
            partner_element=dm_b,
            relationship=relationship_label(dm_a, dm_b),
            description=describe(total),
        )
        logger.debug(f"[MatchModule] {a.day.full} × {b.day.full} → {total} (sim={similarity:.3f})")
        return result

    def score_dates(self, my_date: date, partner_date: date) -> CompatibilityResult:
        """날짜만 아는 경우: 두 사람 모두 정오(12:00) 기준으로 계산"""
        mine = calc_module.resolve(my_date.year, my_date.month, my_date.day, 12, 0)
        partner = calc_module.resolve(partner_date.year, partner_date.month, partner_date.day, 12, 0)
        return self.score(mine, partner)


match_module = MatchModule()


def score(a: FourPillars, b: FourPillars) -> CompatibilityResult:
    return match_module.score(a, b)


def score_dates(my_date: date, partner_date: date) -> CompatibilityResult:
    return match_module.score_dates(my_date, partner_date)
