"""
60갑자 계산 모듈
- 천간(10개) × 지지(12개) = 60갑자
- 오행/음양 정적 테이블
- 연두법(월간 계산), 일주 Anchor, 시두법(시간 천간)
- Pillar 값 타입 (한자 + 한글 이중 표기)
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Tuple

from saju_core.services.errors import CalculationError

# 천간 (10개)
CHEONGAN = ["갑", "을", "병", "정", "무", "기", "경", "신", "임", "계"]
CHEONGAN_HANJA = ["甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸"]

# 지지 (12개)
JIJI = ["자", "축", "인", "묘", "진", "사", "오", "미", "신", "유", "술", "해"]
JIJI_HANJA = ["子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥"]

# 오행 고정 순서 (동점 처리/벡터 순서 모두 이 순서)
ELEMENTS = ["wood", "fire", "earth", "metal", "water"]

ELEMENT_KR = {"wood": "목", "fire": "화", "earth": "토", "metal": "금", "water": "수"}
ELEMENT_HANJA = {"wood": "木", "fire": "火", "earth": "土", "metal": "金", "water": "水"}
ELEMENT_EMOJI = {"wood": "🌳", "fire": "🔥", "earth": "⛰️", "metal": "⚔️", "water": "💧"}


def element_label(element: str) -> str:
    """오행 표시 라벨 (예: 🌳 목(木))"""
    return f"{ELEMENT_EMOJI[element]} {ELEMENT_KR[element]}({ELEMENT_HANJA[element]})"


# 천간 → 오행 (인덱스 기준)
STEM_ELEMENTS = [
    "wood", "wood",
    "fire", "fire",
    "earth", "earth",
    "metal", "metal",
    "water", "water",
]

# 천간 → 음양 (짝수 = 양)
STEM_POLARITY = ["yang", "yin"] * 5

# 지지 → 오행 (토가 4개: 축/진/미/술)
BRANCH_ELEMENTS = [
    "water",  # 자
    "earth",  # 축
    "wood",   # 인
    "wood",   # 묘
    "earth",  # 진
    "fire",   # 사
    "fire",   # 오
    "earth",  # 미
    "metal",  # 신
    "metal",  # 유
    "earth",  # 술
    "water",  # 해
]

# 오행 상생상극
ELEMENT_RELATIONS: Dict[str, Dict[str, str]] = {
    "wood": {"generates": "fire", "overcomes": "earth", "generated_by": "water", "overcome_by": "metal"},
    "fire": {"generates": "earth", "overcomes": "metal", "generated_by": "wood", "overcome_by": "water"},
    "earth": {"generates": "metal", "overcomes": "water", "generated_by": "fire", "overcome_by": "wood"},
    "metal": {"generates": "water", "overcomes": "wood", "generated_by": "earth", "overcome_by": "fire"},
    "water": {"generates": "wood", "overcomes": "fire", "generated_by": "metal", "overcome_by": "earth"},
}

# 일주 Anchor: 2000년 1월 1일 = 무오일 (60갑자 중 54번째)
DAY_ANCHOR_DATE = date(2000, 1, 1)
DAY_ANCHOR_IDX = 54

# 시간대 (자시는 23:00 시작)
HOUR_RANGES = [
    ("23:00", "00:59"),  # 자
    ("01:00", "02:59"),  # 축
    ("03:00", "04:59"),  # 인
    ("05:00", "06:59"),  # 묘
    ("07:00", "08:59"),  # 진
    ("09:00", "10:59"),  # 사
    ("11:00", "12:59"),  # 오
    ("13:00", "14:59"),  # 미
    ("15:00", "16:59"),  # 신
    ("17:00", "18:59"),  # 유
    ("19:00", "20:59"),  # 술
    ("21:00", "22:59"),  # 해
]


def get_sixty_ganji_list() -> List[str]:
    """60갑자 표준 순서 (갑자부터 1칸씩 증가)"""
    return [f"{CHEONGAN_HANJA[i % 10]}{JIJI_HANJA[i % 12]}" for i in range(60)]

SIXTY_GANJI = get_sixty_ganji_list()


@dataclass(frozen=True)
class Pillar:
    """
    사주 기둥 (값 타입)

    천간 인덱스(0-9) + 지지 인덱스(0-11)로만 생성되며,
    한자/한글 표기와 오행은 모두 정적 테이블에서 파생된다.
    """
    gan_index: int
    ji_index: int

    def __post_init__(self):
        if not 0 <= self.gan_index < 10:
            raise ValueError(f"gan_index must be 0-9, got {self.gan_index}")
        if not 0 <= self.ji_index < 12:
            raise ValueError(f"ji_index must be 0-11, got {self.ji_index}")

    @property
    def stem(self) -> str:
        return CHEONGAN_HANJA[self.gan_index]

    @property
    def branch(self) -> str:
        return JIJI_HANJA[self.ji_index]

    @property
    def full(self) -> str:
        return f"{self.stem}{self.branch}"

    @property
    def stem_kr(self) -> str:
        return CHEONGAN[self.gan_index]

    @property
    def branch_kr(self) -> str:
        return JIJI[self.ji_index]

    @property
    def full_kr(self) -> str:
        return f"{self.stem_kr}{self.branch_kr}"

    @property
    def stem_element(self) -> str:
        return STEM_ELEMENTS[self.gan_index]

    @property
    def branch_element(self) -> str:
        return BRANCH_ELEMENTS[self.ji_index]

    @property
    def stem_polarity(self) -> str:
        return STEM_POLARITY[self.gan_index]

    def to_dict(self) -> Dict[str, object]:
        return {
            "stem": self.stem,
            "branch": self.branch,
            "full": self.full,
            "stem_kr": self.stem_kr,
            "branch_kr": self.branch_kr,
            "full_kr": self.full_kr,
            "stem_element": self.stem_element,
            "branch_element": self.branch_element,
            "stem_polarity": self.stem_polarity,
            "gan_index": self.gan_index,
            "ji_index": self.ji_index,
        }

    def __str__(self):
        return f"{self.full}({self.full_kr})"


def parse_pillar(text: str) -> Pillar:
    """
    간지 문자열 → Pillar

    '甲子' / '갑자' 두 표기 모두 허용. 그 외는 CalculationError.
    """
    s = str(text).strip() if text is not None else ""
    if len(s) != 2:
        raise CalculationError(f"Invalid pillar string: {text!r}")

    gan, ji = s[0], s[1]
    if gan in CHEONGAN_HANJA:
        gan_idx = CHEONGAN_HANJA.index(gan)
    elif gan in CHEONGAN:
        gan_idx = CHEONGAN.index(gan)
    else:
        raise CalculationError(f"Invalid pillar string: {text!r}")

    if ji in JIJI_HANJA:
        ji_idx = JIJI_HANJA.index(ji)
    elif ji in JIJI:
        ji_idx = JIJI.index(ji)
    else:
        raise CalculationError(f"Invalid pillar string: {text!r}")

    # 60갑자는 천간/지지 음양이 같은 조합만 존재
    if gan_idx % 2 != ji_idx % 2:
        raise CalculationError(f"Invalid pillar string: {text!r} (not a sexagenary pair)")

    return Pillar(gan_idx, ji_idx)


class GanjiCalculator:
    """60갑자 계산기"""

    # ===== 연주 계산 =====
    @staticmethod
    def calc_year_ganji(adjusted_year: int) -> Tuple[int, int]:
        """
        연주 계산 (입춘 보정된 연도 기준)

        1984년 = 갑자년 기준

        Returns:
            (천간인덱스, 지지인덱스)
        """
        return (adjusted_year - 4) % 10, (adjusted_year - 4) % 12

    # ===== 월주 계산 =====
    @staticmethod
    def calc_month_ganji(year_gan_idx: int, month_ji_idx: int) -> Tuple[int, int]:
        """
        월주 계산 (연두법)

        Args:
            year_gan_idx: 연간 인덱스 (0=갑, 1=을, ...)
            month_ji_idx: 월지 인덱스 (실제 지지 인덱스, 2=인 ... 1=축)

        연두법:
        - 갑/기년: 인월 천간 = 병(2)
        - 을/경년: 인월 천간 = 무(4)
        - 병/신년: 인월 천간 = 경(6)
        - 정/임년: 인월 천간 = 임(8)
        - 무/계년: 인월 천간 = 갑(0)
        """
        start_gan_idx = ((year_gan_idx % 5) * 2 + 2) % 10
        gap = (month_ji_idx - 2) % 12
        return (start_gan_idx + gap) % 10, month_ji_idx

    # ===== 일주 계산 =====
    @staticmethod
    def calc_day_index(year: int, month: int, day: int) -> int:
        """양력 날짜 → 60갑자 인덱스 (자정 기준)"""
        days_diff = (date(year, month, day) - DAY_ANCHOR_DATE).days
        return (DAY_ANCHOR_IDX + days_diff) % 60

    # ===== 시주 계산 =====
    @staticmethod
    def get_hour_ji_index(hour: int) -> int:
        """시간 → 지지 인덱스 (23시 = 자시)"""
        return ((hour + 1) // 2) % 12

    @staticmethod
    def calc_hour_ganji(zi_day_gan_idx: int, hour: int) -> Tuple[int, int]:
        """
        시주 계산 (시두법)

        Args:
            zi_day_gan_idx: 자시가 속한 날의 일간 인덱스
                (23시대는 다음 날 일간을 넘겨야 한다. 일주 자체는 바뀌지 않음)
            hour: 시 (0-23)

        시간 천간 = 일간 기준 자시 천간 + 지지 인덱스
        - 갑/기일 → 갑자시, 을/경일 → 병자시, 병/신일 → 무자시
        - 정/임일 → 경자시, 무/계일 → 임자시
        """
        hour_ji_idx = GanjiCalculator.get_hour_ji_index(hour)
        start_gan_idx = (zi_day_gan_idx % 5) * 2
        return (start_gan_idx + hour_ji_idx) % 10, hour_ji_idx


def get_hour_options() -> List[Dict[str, object]]:
    """시간대 선택 옵션 (12지지)"""
    return [
        {
            "index": idx,
            "ji": JIJI[idx],
            "ji_hanja": JIJI_HANJA[idx],
            "range_start": start,
            "range_end": end,
            "label": f"{JIJI_HANJA[idx]}시 ({JIJI[idx]}시) - {start}~{end}",
        }
        for idx, (start, end) in enumerate(HOUR_RANGES)
    ]


# 싱글톤
ganji_calc = GanjiCalculator()
