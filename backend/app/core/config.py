# 환경변수 로딩 (.env)
from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGO_DB: str = "recipes"
    MONGO_STARTUP_RETRIES: int = 20
    MONGO_STARTUP_DELAY_SECONDS: float = 1.0

    # LLM (OpenAI 호환 엔드포인트 — 기본은 Groq)
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "deepseek-r1-distill-llama-70b"
    LLM_TIMEOUT_SECONDS: float = 60.0
    LLM_STRICT_EXTRACTION: bool = False

    # 영양 분석 (Spoonacular)
    SPOONACULAR_API_KEY: Optional[str] = None
    NUTRITION_BASE_URL: str = "https://api.spoonacular.com"
    NUTRITION_TIMEOUT_SECONDS: float = 20.0

    # 외부 호출 재시도
    UPSTREAM_RETRY_ATTEMPTS: int = 3
    UPSTREAM_RETRY_BASE_DELAY: float = 0.5

    # 앞단 인증 레이어가 채워주는 사용자 식별 헤더
    AUTH_HEADER: str = "X-User-Id"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
