# app/services/parser.py
# 잘라낸 JSON 문자열 → 후보 레시피 목록
# 필드 단위 검증은 저장 시점(RecipeRepository.create)에서 한다

from __future__ import annotations
import json
import logging
from typing import List

from app.core.errors import MalformedJson, NotAnArray
from app.db.models.recipe import CandidateRecipe

log = logging.getLogger(__name__)

def parse_candidates(fragment: str) -> List[CandidateRecipe]:
    try:
        data = json.loads(fragment)
    except (json.JSONDecodeError, TypeError) as e:
        log.warning("model output is not valid JSON: %s", e)
        raise MalformedJson() from e

    if not isinstance(data, list):
        raise NotAnArray()

    # 모델이 준 순서 그대로
    return list(data)
