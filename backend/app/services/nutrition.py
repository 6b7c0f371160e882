# app/services/nutrition.py
# 저장된 레시피 영양정보 계산 (Spoonacular "analyze recipe")
# - 이미 0이 아닌 값이 하나라도 있으면 재계산하지 않음 (전부 0 = 미계산으로 간주)
# - 429 → RateLimited, 그 외 오류 → UpstreamUnavailable, 데이터 없음 → NutritionUnavailable
# - 실패 시 레코드는 건드리지 않는다

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.core.config import Settings
from app.core.errors import NutritionUnavailable, RateLimited, UpstreamUnavailable
from app.core.retry import retry_async
from app.db.models.recipe import NUTRIENT_FIELDS, Nutrition, RecipeOut
from app.db.repository import RecipeRepository

log = logging.getLogger(__name__)

ANALYZE_PATH = "/recipes/analyze"

# 제공자 영양소 이름(소문자) → 저장 필드
NUTRIENT_NAMES = {
    "calories": "calories",
    "protein": "protein",
    "carbohydrates": "carbs",
    "carbs": "carbs",
    "fat": "fats",
    "fats": "fats",
    "cholesterol": "cholesterol",
}


def _retry_after(resp: httpx.Response) -> Optional[float]:
    try:
        return float(resp.headers.get("retry-after", ""))
    except ValueError:
        return None


class NutritionClient:
    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.SPOONACULAR_API_KEY
        self._http = http or httpx.AsyncClient(
            base_url=settings.NUTRITION_BASE_URL,
            timeout=settings.NUTRITION_TIMEOUT_SECONDS,
        )
        self.analyze = retry_async(
            settings.UPSTREAM_RETRY_ATTEMPTS, settings.UPSTREAM_RETRY_BASE_DELAY
        )(self._analyze_once)

    async def _analyze_once(
        self,
        title: str,
        servings: int,
        ingredients: Sequence[str],
        instructions: str,
    ) -> Optional[List[Dict[str, Any]]]:
        """영양소 목록 [{name, amount, unit}, ...] 반환. 응답에 영양정보가 없으면 None."""
        if not self.api_key:
            raise UpstreamUnavailable("SPOONACULAR_API_KEY not set", retryable=False)

        body = {
            "title": title,
            "servings": servings,
            "ingredients": list(ingredients),
            "instructions": instructions,
        }
        try:
            r = await self._http.post(
                ANALYZE_PATH,
                params={"includeNutrition": "true"},
                json=body,
                headers={"x-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            log.exception("nutrition request failed: %s", e)
            raise UpstreamUnavailable("Failed to fetch nutrition data") from e

        if r.status_code == 429:
            log.warning("nutrition provider rate limited (title=%r)", title)
            raise RateLimited(retry_after=_retry_after(r))
        if r.status_code in (401, 402, 403):
            log.error("nutrition provider rejected request: %s %s", r.status_code, r.text[:200])
            raise UpstreamUnavailable("Failed to fetch nutrition data", retryable=False)
        if r.status_code >= 400:
            log.error("nutrition provider error: %s %s", r.status_code, r.text[:200])
            raise UpstreamUnavailable("Failed to fetch nutrition data")

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamUnavailable("Failed to fetch nutrition data") from e

        nutrients = ((data or {}).get("nutrition") or {}).get("nutrients")
        if not isinstance(nutrients, list):
            return None
        return nutrients

    async def close(self) -> None:
        await self._http.aclose()


def extract_nutrients(nutrients: Sequence[Dict[str, Any]]) -> Dict[str, float]:
    # 순서 없는 목록에서 이름 매칭, 없으면 0
    out = {f: 0.0 for f in NUTRIENT_FIELDS}
    for n in nutrients or []:
        if not isinstance(n, dict):
            continue
        field = NUTRIENT_NAMES.get(str(n.get("name", "")).strip().lower())
        if field is None:
            continue
        try:
            out[field] = max(0.0, float(n.get("amount") or 0))
        except (TypeError, ValueError):
            continue
    return out


def has_nutrition(recipe: RecipeOut) -> bool:
    return recipe.nutrition is not None and recipe.nutrition.is_computed()


async def enrich_recipe(
    repo: RecipeRepository, client: NutritionClient, recipe_id: str
) -> RecipeOut:
    recipe = await repo.get_by_id(recipe_id)
    if has_nutrition(recipe):
        log.info("nutrition already present, skipping id=%s", recipe_id)
        return recipe

    nutrients = await client.analyze(
        recipe.title, recipe.servings, recipe.ingredients, recipe.instructions
    )
    if not nutrients:
        log.warning("nutrition provider returned no nutrients id=%s", recipe_id)
        raise NutritionUnavailable()

    values = Nutrition(**extract_nutrients(nutrients))
    return await repo.update_partial(recipe_id, {"nutrition": values.model_dump()})
