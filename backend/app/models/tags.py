from typing import Iterable, List, Optional
import logging
import re

log = logging.getLogger(__name__)

# === 표준 태그(식단/끼니) =====================================================
CANON = {
    # 식단 제약/선호
    "diet": [
        "vegan", "vegetarian", "pescatarian", "gluten-free", "dairy-free",
        "nut-free", "keto", "paleo", "low-carb", "high-protein", "low-fat",
    ],
    # 끼니/코스
    "meal": ["breakfast", "brunch", "lunch", "dinner", "snack", "dessert", "appetizer", "side"],
}

MAX_TAGS = 10

# 동의어/표기 흔들림 → 표준 라벨
_CANON_SYNONYMS = {
    "glutenfree": "gluten-free",
    "gluten free": "gluten-free",
    "dairyfree": "dairy-free",
    "dairy free": "dairy-free",
    "lactose-free": "dairy-free",
    "nutfree": "nut-free",
    "lowcarb": "low-carb",
    "low carb": "low-carb",
    "ketogenic": "keto",
    "highprotein": "high-protein",
    "high protein": "high-protein",
    "lowfat": "low-fat",
    "low fat": "low-fat",
    "veggie": "vegetarian",
    "starter": "appetizer",
}

def is_valid(tag: str) -> bool:
    return any(tag in vals for vals in CANON.values())

def canonicalize(tag: str) -> Optional[str]:
    """태그 하나를 소문자/공백 정리 후 표준 라벨로. 빈 값이면 None."""
    s = re.sub(r"\s+", " ", (tag or "").strip().lower())
    if not s:
        return None
    return _CANON_SYNONYMS.get(s, s)

def normalize_tags(tags: Iterable[str], max_tags: int = MAX_TAGS) -> List[str]:
    # 순서 유지 중복 제거. 사전에 없는 태그도 버리지 않는다(경고만)
    out: List[str] = []
    for t in tags or []:
        c = canonicalize(str(t))
        if not c or c in out:
            continue
        if not is_valid(c):
            log.debug("unrecognized tag kept: %r", c)
        out.append(c)
    return out[:max_tags]
