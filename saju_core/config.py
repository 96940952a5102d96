"""
Saju Core Settings
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 고정 타임존 (Asia/Seoul, UTC+9)
- 입력 연도 범위 / 정밀 만세력 적용 범위
- 서버 설정 (FastAPI)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 달력 기준 (타임존은 고정, 요청 단위로 바꾸지 않음)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    timezone_name: str = "Asia/Seoul"
    utc_offset_hours: int = 9

    # 입력 허용 연도
    min_year: int = 1900
    max_year: int = 2100

    # 정밀 만세력(lunar_python) 적용 구간, 밖은 ephem 천문 계산
    precise_year_min: int = 1950
    precise_year_max: int = 2050

    # 절 경계 근접 판정 (태양 황경 ±도)
    boundary_threshold_deg: float = 1.5

    # 계산 결과 캐시
    cache_ttl_seconds: int = 86400
    cache_max_size: int = 10000

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    allowed_origins: str = "http://localhost:3000"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_prefix = "SAJU_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
