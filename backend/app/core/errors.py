# app/core/errors.py
# 도메인 예외 — 라우터 경계(main.py 핸들러)에서 {"error": message} 로 변환된다

from __future__ import annotations


class RecipeError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidInput(RecipeError):
    status_code = 400
    message = "Invalid input"


class MissingFields(InvalidInput):
    message = "Missing required fields"

    def __init__(self, fields: list[str] | None = None):
        self.fields = list(fields or [])
        detail = self.message
        if self.fields:
            detail = f"{self.message}: {', '.join(self.fields)}"
        super().__init__(detail)


class UpstreamUnavailable(RecipeError):
    status_code = 502
    message = "Upstream service unavailable"

    def __init__(self, message: str | None = None, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class RateLimited(UpstreamUnavailable):
    status_code = 429
    message = "Rate limit exceeded, try again later"

    def __init__(self, message: str | None = None, retry_after: float | None = None):
        super().__init__(message, retryable=False)
        self.retry_after = retry_after


class ModelOutputError(RecipeError):
    # LLM 응답을 레시피 목록으로 못 바꾼 경우
    status_code = 502
    message = "Failed to parse generated recipes"


class NoJsonFound(ModelOutputError):
    message = "No JSON array found in the response"


class MalformedJson(ModelOutputError):
    message = "Generated response is not valid JSON"


class NotAnArray(ModelOutputError):
    message = "Response is not an array"


class NotFound(RecipeError):
    status_code = 404
    message = "Recipe not found"


class NutritionUnavailable(RecipeError):
    status_code = 502
    message = "Nutrition data unavailable"
