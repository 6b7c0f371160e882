# app/api/routes_recipes.py
# 사용자 저장 레시피 — 저장/목록/단건/부분수정/삭제/영양정보 계산
# 모든 연산은 요청자 소유 레시피로 한정 (RecipeRepository가 owner 바인딩)

from __future__ import annotations
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.core.deps import get_nutrition_client, get_recipe_repository
from app.db.models.recipe import RecipeIn, RecipeOut, RecipePatch
from app.db.repository import RecipeRepository
from app.services.nutrition import NutritionClient, enrich_recipe

log = logging.getLogger(__name__)

router = APIRouter(tags=["recipes"])

class SaveRecipeResponse(BaseModel):
    message: str
    recipe: RecipeOut

class RecipeListResponse(BaseModel):
    recipes: List[RecipeOut]

class RecipeResponse(BaseModel):
    recipe: RecipeOut

class MessageResponse(BaseModel):
    message: str

@router.post("/save-recipe", status_code=201, response_model=SaveRecipeResponse)
async def save_recipe(
    payload: RecipeIn,
    repo: RecipeRepository = Depends(get_recipe_repository),
):
    recipe = await repo.create(payload.model_dump())
    return SaveRecipeResponse(message="Recipe saved", recipe=recipe)

@router.get("/saved-recipes", response_model=RecipeListResponse)
async def list_saved_recipes(
    favourite: Optional[bool] = Query(None, description="즐겨찾기만/제외"),
    tag: Optional[str] = Query(None, description="태그 필터 (예: vegan)"),
    repo: RecipeRepository = Depends(get_recipe_repository),
):
    recipes = await repo.list_by_owner(favourite=favourite, tag=tag)
    return RecipeListResponse(recipes=recipes)

@router.get("/saved-recipes/{recipe_id}", response_model=RecipeResponse)
async def get_saved_recipe(
    recipe_id: str,
    repo: RecipeRepository = Depends(get_recipe_repository),
):
    return RecipeResponse(recipe=await repo.get_by_id(recipe_id))

@router.patch("/saved-recipes/{recipe_id}", response_model=RecipeResponse)
async def update_saved_recipe(
    recipe_id: str,
    payload: RecipePatch,
    repo: RecipeRepository = Depends(get_recipe_repository),
):
    """보낸 필드만 반영 (merge-patch). null 값은 무시"""
    fields = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    return RecipeResponse(recipe=await repo.update_partial(recipe_id, fields))

@router.delete("/saved-recipes/{recipe_id}", response_model=MessageResponse)
async def delete_saved_recipe(
    recipe_id: str,
    repo: RecipeRepository = Depends(get_recipe_repository),
):
    await repo.delete_by_id(recipe_id)
    return MessageResponse(message="Recipe deleted")

@router.post("/saved-recipes/{recipe_id}/nutrition", response_model=RecipeResponse)
async def compute_nutrition(
    recipe_id: str,
    repo: RecipeRepository = Depends(get_recipe_repository),
    client: NutritionClient = Depends(get_nutrition_client),
):
    """영양정보 계산 후 저장. 이미 계산된 레시피는 그대로 반환"""
    return RecipeResponse(recipe=await enrich_recipe(repo, client, recipe_id))
