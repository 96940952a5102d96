"""
/calculate, /compatibility 엔드포인트

만세력 우선순위:
1. lunar_python 정밀 만세력 (현대 구간)
2. ephem 천문 계산 (구간 밖)

에러:
- 입력 범위 위반 → 400 INVALID_INPUT
- 만세력 백엔드 실패 → 500 CALCULATION_ERROR
"""
from fastapi import APIRouter, HTTPException
from typing import List
import logging

from saju_core.models.schemas import (
    BirthInput,
    CalculateResponse,
    CompatibilityRequest,
    CompatibilityResponse,
    ErrorResponse,
    HourOption
)
from saju_core.services.errors import CalculationError, InputValidationError
from saju_core.services.saju_engine import saju_engine

logger = logging.getLogger(__name__)
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _invalid_input(e: InputValidationError) -> HTTPException:
    logger.warning(f"Invalid input: {e}")
    return HTTPException(
        status_code=400,
        detail={
            "error_code": "INVALID_INPUT",
            "message": f"입력값이 허용 범위를 벗어났습니다: {e.field}",
            "detail": e.reason
        }
    )


def _calculation_failed(e: CalculationError) -> HTTPException:
    logger.error(f"Calculation error: {e}")
    return HTTPException(
        status_code=500,
        detail={
            "error_code": "CALCULATION_ERROR",
            "message": "사주 계산에 실패했습니다.",
            "detail": str(e)
        }
    )


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    responses=ERROR_RESPONSES,
    summary="사주 계산 (4주 + 오행 분석)",
    description="""
양력 출생 시각(Asia/Seoul 고정)으로 사주 원국과 오행 분포를 계산합니다.

- 연주: 입춘 절입 시각 기준
- 월주: 12절 절입 시각 기준
- 일주: 자정 기준
- 시주: 23:00부터 자시 (일주는 자정에 바뀜)
    """
)
async def calculate_saju(request: BirthInput):
    try:
        result = saju_engine.calculate(
            year=request.year,
            month=request.month,
            day=request.day,
            hour=request.hour,
            minute=request.minute
        )
    except InputValidationError as e:
        raise _invalid_input(e)
    except CalculationError as e:
        raise _calculation_failed(e)

    logger.info(
        f"Saju calculated: {request.year}-{request.month}-{request.day} "
        f"| Source: {result.saju.source}"
    )
    return saju_engine.to_response(result)


@router.post(
    "/compatibility",
    response_model=CompatibilityResponse,
    responses=ERROR_RESPONSES,
    summary="궁합 점수",
    description="두 사람의 출생 시각으로 0~100 궁합 점수와 관계 라벨을 계산합니다."
)
async def calculate_compatibility(request: CompatibilityRequest):
    try:
        result = saju_engine.compatibility(
            me=request.me.model_dump(),
            partner=request.partner.model_dump()
        )
    except InputValidationError as e:
        raise _invalid_input(e)
    except CalculationError as e:
        raise _calculation_failed(e)

    return saju_engine.to_compatibility_response(result)


@router.get(
    "/calculate/hour-options",
    response_model=List[HourOption],
    summary="시간대 선택 옵션",
    description="출생 시간 입력을 위한 시간대(2시간 단위) 선택 옵션 목록"
)
async def get_hour_options():
    """시간대 선택 옵션 목록"""
    return saju_engine.get_hour_options()
