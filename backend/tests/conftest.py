import copy
import itertools
from typing import Any, Dict, List, Optional

import bson
import pytest
from bson import ObjectId
from bson.codec_options import CodecOptions
from pymongo import ReturnDocument

from app.core.config import Settings
from app.db.repository import COLLECTION, RecipeRepository


# 실제 Mongo(tz_aware=True)처럼 BSON 인코딩을 한 번 거친다 (밀리초 절삭, tz 복원)
_CODEC = CodecOptions(tz_aware=True)


def _stored(doc: Dict[str, Any]) -> Dict[str, Any]:
    return bson.decode(bson.encode(doc), codec_options=_CODEC)


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for k, v in query.items():
        if k not in doc:
            return False
        have = doc[k]
        # Mongo 배열 필드는 원소 포함 여부로 매칭
        if isinstance(have, list) and not isinstance(v, list):
            if v not in have:
                return False
        elif have != v:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    async def to_list(self, length: Optional[int] = None):
        return self._docs if length is None else self._docs[:length]


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    """motor AsyncIOMotorCollection 중 리포지토리가 쓰는 부분만 흉내"""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.indexes: List[Any] = []

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self.docs.append(_stored(doc))
        return FakeInsertResult(doc["_id"])

    def find(self, query):
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    async def find_one(self, query):
        for d in self.docs:
            if _matches(d, query):
                return copy.deepcopy(d)
        return None

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        for d in self.docs:
            if _matches(d, query):
                before = copy.deepcopy(d)
                d.update(_stored(update.get("$set", {})))
                return copy.deepcopy(d) if return_document == ReturnDocument.AFTER else before
        return None

    async def find_one_and_delete(self, query):
        for i, d in enumerate(self.docs):
            if _matches(d, query):
                return self.docs.pop(i)
        return None

    async def create_index(self, keys, **kwargs):
        self.indexes.append(keys)
        return "idx_%d" % len(self.indexes)


class FakeDB:
    def __init__(self):
        self._cols: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self._cols.setdefault(name, FakeCollection())

    async def command(self, name):
        return {"ok": 1}


class FakeCompletionClient:
    def __init__(self, text: str):
        self.text = text
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


_counter = itertools.count()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        LLM_API_KEY="test-llm-key",
        SPOONACULAR_API_KEY="test-spoon-key",
        NUTRITION_BASE_URL="https://nutrition.test",
        UPSTREAM_RETRY_ATTEMPTS=3,
        UPSTREAM_RETRY_BASE_DELAY=0,
    )


@pytest.fixture
def fake_db() -> FakeDB:
    return FakeDB()


@pytest.fixture
def recipes_col(fake_db) -> FakeCollection:
    return fake_db[COLLECTION]


@pytest.fixture
def repo(recipes_col) -> RecipeRepository:
    return RecipeRepository(recipes_col, "user-1")


@pytest.fixture
def other_repo(recipes_col) -> RecipeRepository:
    return RecipeRepository(recipes_col, "user-2")


@pytest.fixture
def recipe_fields() -> Dict[str, Any]:
    n = next(_counter)
    return {
        "title": f"Pancake {n}",
        "description": "Fluffy pancakes",
        "ingredients": ["egg", "flour", "milk"],
        "instructions": "1. Mix. 2. Fry.",
    }
