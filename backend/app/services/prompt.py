# app/services/prompt.py
# 재료/선호/끼니 → LLM 지시문
# 빈 목록이면 해당 문장을 아예 붙이지 않는다 ("using the following ingredients: " 같은 빈 구절 방지)

from __future__ import annotations
from typing import Optional, Sequence

SCHEMA_DIRECTIVE = (
    ". Return only a JSON array of objects, each containing "
    "'title' (string), 'description' (string), "
    "'ingredients' (array of strings), and 'instructions' (string). "
    "Do not include any additional text."
)

def build_prompt(
    ingredients: Sequence[str],
    preferences: Sequence[str],
    meal_type: Optional[str] = None,
) -> str:
    prompt = "Generate recipe suggestions"
    if ingredients:
        prompt += f" using the following ingredients: {', '.join(ingredients)}"
    if preferences:
        prompt += f". The recipes should be {' and '.join(preferences)}"
    if meal_type and meal_type.strip():
        prompt += f". The recipes should be suitable for {meal_type.strip()}"
    return prompt + SCHEMA_DIRECTIVE
