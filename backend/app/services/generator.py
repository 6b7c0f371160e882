# app/services/generator.py
# 레시피 생성 파이프라인: 프롬프트 → LLM → JSON 배열 추출 → 후보 파싱

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from app.db.models.recipe import CandidateRecipe
from app.services.completion import CompletionClient
from app.services.extract import extract_json_array, scan_json_array
from app.services.parser import parse_candidates
from app.services.prompt import build_prompt

log = logging.getLogger(__name__)

async def generate_recipes(
    client: CompletionClient,
    ingredients: Sequence[str],
    preferences: Sequence[str],
    meal_type: Optional[str] = None,
    strict: bool = False,
) -> List[CandidateRecipe]:
    prompt = build_prompt(ingredients, preferences, meal_type)
    text = await client.complete(prompt)

    fragment = scan_json_array(text) if strict else extract_json_array(text)
    recipes = parse_candidates(fragment)
    log.info(
        "generated %d recipe(s) (ingredients=%d, preferences=%d, meal_type=%s)",
        len(recipes), len(ingredients), len(preferences), meal_type,
    )
    return recipes
