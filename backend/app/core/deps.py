# 공용 의존성 (사용자 식별, DB/외부 클라이언트 핸들)
# 클라이언트들은 스타트업에서 만들어 app.state에 올려두고 여기서 꺼내 쓴다
import uuid

from fastapi import Depends, Request, Response
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.config import settings
from app.db.repository import COLLECTION, RecipeRepository
from app.services.completion import CompletionClient
from app.services.nutrition import NutritionClient

COOKIE = "anon_id"
MAX_AGE = 60 * 60 * 24 * 365 * 2  # 2년

def get_owner_id(request: Request, response: Response) -> str:
    # 앞단 인증 레이어가 넣어준 헤더 우선, 없으면 익명 쿠키 (없으면 발급)
    v = (request.headers.get(settings.AUTH_HEADER) or "").strip()
    if v:
        return v
    v = request.cookies.get(COOKIE)
    if not v:
        v = uuid.uuid4().hex
        response.set_cookie(COOKIE, v, max_age=MAX_AGE, httponly=True, samesite="lax")
    return v

def get_db(request: Request) -> AsyncIOMotorDatabase:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("MongoDB is not initialized yet.")
    return db

def get_recipe_repository(
    owner_id: str = Depends(get_owner_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> RecipeRepository:
    return RecipeRepository(db[COLLECTION], owner_id)

def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion

def get_nutrition_client(request: Request) -> NutritionClient:
    return request.app.state.nutrition
