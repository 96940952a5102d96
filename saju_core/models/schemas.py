"""
Pydantic 스키마 정의
API 요청/응답 모델
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Literal


Element = Literal["wood", "fire", "earth", "metal", "water"]


# ============ /calculate 요청/응답 ============

class BirthInput(BaseModel):
    """양력 출생 시각 (Asia/Seoul 고정)

    범위 검증은 계산 모듈이 필드별로 수행한다 (위반 시 400).
    """
    year: int = Field(..., description="출생 년도 (1900-2100)")
    month: int = Field(..., description="출생 월 (1-12)")
    day: int = Field(..., description="출생 일 (1-31)")
    hour: int = Field(..., description="출생 시 (0-23)")
    minute: int = Field(0, description="출생 분 (0-59)")

    class Config:
        json_schema_extra = {
            "example": {
                "year": 1990,
                "month": 5,
                "day": 15,
                "hour": 23,
                "minute": 0
            }
        }


class PillarOut(BaseModel):
    """사주 기둥 (한자 + 한글 이중 표기)"""
    stem: str = Field(..., description="천간 한자 (甲~癸)")
    branch: str = Field(..., description="지지 한자 (子~亥)")
    full: str = Field(..., description="간지 한자 (예: 甲子)")
    stem_kr: str = Field(..., description="천간 한글 (갑~계)")
    branch_kr: str = Field(..., description="지지 한글 (자~해)")
    full_kr: str = Field(..., description="간지 한글 (예: 갑자)")

    # 오행/음양
    stem_element: Element
    branch_element: Element
    stem_polarity: Literal["yang", "yin"]

    # 인덱스
    gan_index: int = Field(..., ge=0, le=9, description="천간 인덱스 (0-9)")
    ji_index: int = Field(..., ge=0, le=11, description="지지 인덱스 (0-11)")


class FourPillarsOut(BaseModel):
    """사주 원국 (4개 기둥)"""
    year: PillarOut = Field(..., description="년주")
    month: PillarOut = Field(..., description="월주")
    day: PillarOut = Field(..., description="일주 (일간=나)")
    hour: PillarOut = Field(..., description="시주")


class ElementAnalysisOut(BaseModel):
    """오행 분석"""
    balance: Dict[str, int] = Field(..., description="오행 백분율 (합계 100)")
    counts: Dict[str, int] = Field(..., description="오행 개수 (8글자)")
    yin_yang: Dict[str, int] = Field(..., description="음양 백분율 (천간 기준)")
    day_master: Element = Field(..., description="일간 오행")
    day_master_hanja: str = Field(..., description="일간 한자")
    dominant: Element
    weakest: Element


class QualityInfo(BaseModel):
    """계산 품질 정보 (정확도 배지용)"""
    solar_term_boundary: bool = Field(..., description="절기 경계 여부")
    boundary_reason: Optional[str] = Field(None, description="경계 사유 (near_ipchun/near_term_change)")
    timezone: str = Field("Asia/Seoul", description="타임존")
    calculation_method: str = Field(..., description="만세력 백엔드 (lunar_python/ephem)")


class CalculateResponse(BaseModel):
    """사주 계산 응답"""
    success: bool = True
    input: BirthInput
    pillars: FourPillarsOut
    analysis: ElementAnalysisOut
    day_master_description: str
    day_master_label: str = Field(..., description="일간 오행 표시 (예: 🌳 목(木))")
    quality: QualityInfo


class HourOption(BaseModel):
    """시간대 선택 옵션"""
    index: int = Field(..., description="지지 인덱스 (0-11)")
    ji: str = Field(..., description="지지 한글 (자~해)")
    ji_hanja: str = Field(..., description="지지 한자 (子~亥)")
    range_start: str = Field(..., description="시작 시간 (HH:MM)")
    range_end: str = Field(..., description="종료 시간 (HH:MM)")
    label: str = Field(..., description="표시 라벨")


# ============ /compatibility 요청/응답 ============

class CompatibilityRequest(BaseModel):
    """궁합 요청"""
    me: BirthInput
    partner: BirthInput


class CompatibilityResponse(BaseModel):
    """궁합 응답"""
    success: bool = True
    score: int = Field(..., ge=0, le=100)
    my_element: Element
    partner_element: Element
    relationship: str
    description: str


# ============ 에러 응답 ============

class ErrorResponse(BaseModel):
    """에러 응답"""
    success: bool = False
    error_code: str
    message: str
    detail: Optional[str] = None
