# app/services/extract.py
# LLM 응답 원문에서 JSON 배열 부분만 잘라내기
# - 기본: 첫 '[' ~ 마지막 ']' (괄호 짝/이스케이프 검사 안 함, 파싱 실패는 parser가 잡는다)
# - 옵션: scan_json_array — 문자열 안의 괄호를 무시하는 엄격 스캐너

from __future__ import annotations
import json

from app.core.errors import NoJsonFound

_decoder = json.JSONDecoder()

def extract_json_array(text: str) -> str:
    text = text or ""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end < start:
        raise NoJsonFound()
    return text[start:end + 1]

def scan_json_array(text: str) -> str:
    """
    각 '[' 위치에서 raw_decode를 시도해 처음으로 완결된 JSON 배열을 반환.
    모델이 배열 앞에 "[note]" 같은 대괄호 문구를 붙여도 건너뛴다.
    """
    text = text or ""
    pos = text.find("[")
    while pos != -1:
        try:
            value, end = _decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            pos = text.find("[", pos + 1)
            continue
        if isinstance(value, list):
            return text[pos:end]
        pos = text.find("[", pos + 1)
    raise NoJsonFound()
