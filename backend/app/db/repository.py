# app/db/repository.py
# 사용자 소유 레시피 CRUD — 소유자(owner_id)는 생성 시 한 번 바인딩
# 모든 조회/수정/삭제 필터는 _scope()로만 만든다 (타인 문서 접근 불가)

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
import logging

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pydantic import ValidationError

from app.core.errors import InvalidInput, MissingFields, NotFound
from app.db.models.recipe import Nutrition, RecipeOut
from app.models.tags import canonicalize, normalize_tags

log = logging.getLogger(__name__)

COLLECTION = "recipes"
REQUIRED_TEXT = ("title", "description", "instructions")
# 부분 수정으로 바꿀 수 있는 필드 (owner_id/created_at/_id 제외)
MUTABLE_FIELDS = {
    "title", "description", "ingredients", "instructions",
    "servings", "tags", "nutrition", "favourite",
}


def _text(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def _now_ms() -> datetime:
    # Mongo는 밀리초까지만 저장 → 저장 전후 값이 같도록 미리 자른다
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _servings(v: Any) -> int:
    if v is None:
        return 1
    if isinstance(v, bool) or not isinstance(v, int) or v < 1:
        raise InvalidInput("servings must be a positive integer")
    return v


def _nutrition(v: Any) -> Optional[Dict[str, float]]:
    if v is None:
        return None
    try:
        return Nutrition.model_validate(v).model_dump()
    except ValidationError:
        raise InvalidInput("nutrition values must be non-negative numbers")


def _missing_fields(fields: Mapping[str, Any]) -> List[str]:
    missing = [k for k in REQUIRED_TEXT if not _text(fields.get(k))]
    ings = fields.get("ingredients")
    if (
        not isinstance(ings, list)
        or not ings
        or not all(isinstance(i, str) and i.strip() for i in ings)
    ):
        missing.append("ingredients")
    return missing


class RecipeRepository:
    def __init__(self, collection: AsyncIOMotorCollection, owner_id: str):
        if not owner_id:
            raise ValueError("owner_id is required")
        self.col = collection
        self.owner_id = owner_id

    def _scope(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        q: Dict[str, Any] = {"owner_id": self.owner_id}
        if extra:
            q.update(extra)
        return q

    def _id_scope(self, recipe_id: str) -> Dict[str, Any]:
        # 잘못된 ObjectId 문자열도 "없는 레시피"와 같게 취급
        try:
            oid = ObjectId(recipe_id)
        except (InvalidId, TypeError):
            raise NotFound()
        return self._scope({"_id": oid})

    async def create(self, fields: Mapping[str, Any]) -> RecipeOut:
        missing = _missing_fields(fields)
        if missing:
            raise MissingFields(missing)

        # insert 전에 전부 검증 (저장 후 실패 = 부분 쓰기)
        servings = _servings(fields.get("servings"))
        nutrition = _nutrition(fields.get("nutrition"))
        doc: Dict[str, Any] = {
            "title": _text(fields["title"]),
            "description": _text(fields["description"]),
            "ingredients": [i.strip() for i in fields["ingredients"]],
            "instructions": fields["instructions"],
            "servings": servings,
            "tags": normalize_tags(fields.get("tags") or []),
            "nutrition": nutrition,
            "favourite": False,
            "owner_id": self.owner_id,
            "created_at": _now_ms(),
        }
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        log.info("recipe created id=%s owner=%s", res.inserted_id, self.owner_id)
        return RecipeOut.from_doc(doc)

    async def list_by_owner(
        self, favourite: Optional[bool] = None, tag: Optional[str] = None
    ) -> List[RecipeOut]:
        extra: Dict[str, Any] = {}
        if favourite is not None:
            extra["favourite"] = favourite
        # 저장 시와 같은 규칙으로 정규화 ("Gluten Free" → "gluten-free")
        tag = canonicalize(tag) if tag else None
        if tag:
            extra["tags"] = tag
        docs = await self.col.find(self._scope(extra)).to_list(length=None)
        return [RecipeOut.from_doc(d) for d in docs]

    async def get_by_id(self, recipe_id: str) -> RecipeOut:
        doc = await self.col.find_one(self._id_scope(recipe_id))
        if not doc:
            raise NotFound()
        return RecipeOut.from_doc(doc)

    async def update_partial(self, recipe_id: str, fields: Mapping[str, Any]) -> RecipeOut:
        patch = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
        dropped = set(fields) - set(patch)
        if dropped:
            log.debug("ignoring immutable/unknown fields in patch: %s", sorted(dropped))
        if not patch:
            return await self.get_by_id(recipe_id)

        doc = await self.col.find_one_and_update(
            self._id_scope(recipe_id),
            {"$set": patch},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFound()
        return RecipeOut.from_doc(doc)

    async def delete_by_id(self, recipe_id: str) -> None:
        doc = await self.col.find_one_and_delete(self._id_scope(recipe_id))
        if not doc:
            raise NotFound()
        log.info("recipe deleted id=%s owner=%s", recipe_id, self.owner_id)
