"""
Saju Core - Main App
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- /api/v1/calculate       사주 4주 + 오행 분석
- /api/v1/compatibility   궁합 점수
- /health                 헬스체크
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from saju_core.config import get_settings
from saju_core.services.cache import cache_service

settings = get_settings()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Saju Core", version="1.0.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {
        "service": "Saju Core",
        "status": "running",
        "timezone": settings.timezone_name,
        "precise_range": [settings.precise_year_min, settings.precise_year_max],
        "cache": cache_service.get_stats(),
    }


from saju_core.routers import calculate  # noqa: E402

app.include_router(calculate.router, prefix="/api/v1", tags=["Calculate"])
logger.info("✅ calculate 라우터 등록")


@app.exception_handler(Exception)
async def error_handler(request: Request, exc: Exception):
    logger.error(f"Error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error_code": "INTERNAL_ERROR", "message": str(exc)[:100]}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
