# app/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 라우터는 각 기능별로 분리하여 관리

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes_generate import router as generate_router   # 레시피 후보 생성
from app.api.routes_recipes import router as recipes_router     # 저장 레시피 CRUD/영양
from app.core.config import settings
from app.core.errors import RecipeError
from app.db.indexes import ensure_indexes
from app.db.init import close_db, init_db
from app.services.completion import CompletionClient
from app.services.nutrition import NutritionClient

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("app")

app = FastAPI(title="Recipe Generator - API", version="0.1.0")

# CORS: 프론트 개발 서버 허용 + 쿠키 전달
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 에러 → {"error": message} (스택/제공자 상세는 로그에만)
@app.exception_handler(RecipeError)
async def recipe_error_handler(request: Request, exc: RecipeError) -> JSONResponse:
    log.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    headers = None
    retry_after = getattr(exc, "retry_after", None)
    if retry_after:
        headers = {"Retry-After": str(int(retry_after))}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    first = errs[0] if errs else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = f"Invalid {loc}: {first.get('msg', 'invalid value')}" if loc else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": msg})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

# 앱 시작/종료 이벤트 핸들러
@app.on_event("startup")
async def on_startup() -> None:
    # 외부 API 클라이언트는 한 번만 만들고 공유
    app.state.completion = CompletionClient(settings)
    app.state.nutrition = NutritionClient(settings)

    # DB 연결 (재시도 포함) → 인덱스 보장
    app.state.mongo, app.state.db = await init_db(settings)
    log.info("db ready (%s)", settings.MONGO_DB)
    try:
        await ensure_indexes(app.state.db)
        log.info("indexes ensured")
    except Exception as e:
        log.error("ensure_indexes failed: %s", e)

@app.on_event("shutdown")
async def on_shutdown() -> None:
    close_db(getattr(app.state, "mongo", None))
    for name in ("completion", "nutrition"):
        client = getattr(app.state, name, None)
        if client is not None:
            await client.close()

@app.get("/")
async def root():
    return {"status": "ok"}

@app.get("/health")
async def health():
    # 간단한 헬스체크 (DB ping)
    ok = {"status": "ok", "db": "skip"}
    db = getattr(app.state, "db", None)
    if db is not None:
        try:
            await db.command("ping")
            ok["db"] = "ok"
        except Exception:
            # 상세 내용은 로그에만
            log.exception("health check: db ping failed")
            ok["db"] = "error"
    return ok

# 라우터 prefix는 각 파일 내에서 정의함 , 중복 prefix 금지
app.include_router(generate_router)
app.include_router(recipes_router)
