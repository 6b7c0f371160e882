# app/api/routes_generate.py
# 재료/선호 입력 → LLM 레시피 후보 생성 (저장은 /save-recipe에서)

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.deps import get_completion_client
from app.db.models.recipe import GenerateRequest, GenerateResponse
from app.services.completion import CompletionClient
from app.services.generator import generate_recipes

router = APIRouter(tags=["generate"])

@router.post("/generate-recipes", response_model=GenerateResponse)
async def generate(
    payload: GenerateRequest,
    client: CompletionClient = Depends(get_completion_client),
):
    """레시피 후보 생성. 실패는 main.py 핸들러가 {"error": ...}로 변환"""
    recipes = await generate_recipes(
        client,
        payload.ingredients,
        payload.preferences,
        payload.mealType,
        strict=settings.LLM_STRICT_EXTRACTION,
    )
    return GenerateResponse(recipes=recipes)
