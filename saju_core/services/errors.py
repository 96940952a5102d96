"""
사주 코어 예외 정의
- InputValidationError: 입력 범위 위반 (필드별)
- CalculationError: 만세력 백엔드 오류 (파싱 실패 포함)
"""


class SajuError(Exception):
    """사주 코어 공통 예외"""
    pass


class InputValidationError(SajuError, ValueError):
    """입력값 범위 오류 (필드명 + 사유)"""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class CalculationError(SajuError):
    """계산 오류 (만세력 응답 파싱 실패 등)"""
    pass
