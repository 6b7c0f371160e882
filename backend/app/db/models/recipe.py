# 레시피 표준 스키마
# - RecipeIn: 저장 요청 바디 (필수값 누락은 리포지토리가 MissingFields로 판정)
# - RecipePatch: 부분 수정 (보낸 필드만 반영)
# - RecipeOut: 프론트 응답 (camelCase)
from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from app.models.tags import normalize_tags

# LLM이 뱉은 후보 레시피 — 저장 전까지는 dict 그대로 통과
CandidateRecipe = Dict[str, Any]

def _utc(dt: datetime) -> datetime:
    # tz_aware=False 클라이언트는 naive UTC를 돌려준다
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fats", "cholesterol")

class Nutrition(BaseModel):
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fats: float = Field(default=0, ge=0)
    cholesterol: float = Field(default=0, ge=0)

    def is_computed(self) -> bool:
        # 전부 0이면 "아직 계산 안 됨"으로 본다
        return any(getattr(self, f) > 0 for f in NUTRIENT_FIELDS)

# # 레시피 생성 요청
class GenerateRequest(BaseModel):
    ingredients: List[StrictStr]
    preferences: List[StrictStr]
    mealType: Optional[StrictStr] = None

class GenerateResponse(BaseModel):
    recipes: List[Any]

class RecipeIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[List[StrictStr]] = None
    instructions: Optional[str] = None
    servings: int = Field(default=1, ge=1)
    tags: List[str] = Field(default_factory=list)
    nutrition: Optional[Nutrition] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _v_tags(cls, v):
        if isinstance(v, str):
            v = [v]
        return normalize_tags(v or [])

class RecipePatch(BaseModel):
    # 소유자/생성시각/id는 여기 없음 → 수정 불가
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    ingredients: Optional[List[StrictStr]] = Field(default=None, min_length=1)
    instructions: Optional[str] = Field(default=None, min_length=1)
    servings: Optional[int] = Field(default=None, ge=1)
    tags: Optional[List[str]] = None
    favourite: Optional[bool] = None

    @field_validator("title", "description", "instructions", mode="after")
    @classmethod
    def _v_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v.strip() if v is not None else v

    @field_validator("ingredients", mode="after")
    @classmethod
    def _v_ingredients(cls, v):
        if v is not None and not all(s.strip() for s in v):
            raise ValueError("ingredients must be non-empty strings")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _v_tags(cls, v):
        if isinstance(v, str):
            v = [v]
        return None if v is None else normalize_tags(v)

class RecipeOut(BaseModel):
    id: str
    title: str
    description: str
    ingredients: List[str]
    instructions: str
    servings: int = 1
    tags: List[str] = Field(default_factory=list)
    nutrition: Optional[Nutrition] = None
    favourite: bool = False
    ownerId: str
    createdAt: datetime

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "RecipeOut":
        # Mongo 문서(snake_case, _id) → 응답 스키마
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            description=doc["description"],
            ingredients=list(doc.get("ingredients") or []),
            instructions=doc["instructions"],
            servings=doc.get("servings") or 1,
            tags=list(doc.get("tags") or []),
            nutrition=doc.get("nutrition"),
            favourite=bool(doc.get("favourite", False)),
            ownerId=doc["owner_id"],
            createdAt=_utc(doc["created_at"]),
        )
