"""AI macro optimization with validation, retries and Polish error messages."""

import asyncio
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from diet_planner.adapters.macro_optimization_client import MacroOptimizationClient
from diet_planner.domain.optimization import (
    OptimizationError,
    OptimizationRequest,
    OptimizationResponse,
)

_logger = logging.getLogger(__name__)

INVALID_INPUT = "INVALID_INPUT"
UNAUTHORIZED = "UNAUTHORIZED"
INVALID_TOKEN = "INVALID_TOKEN"
FORBIDDEN = "FORBIDDEN"
DATABASE_ERROR = "DATABASE_ERROR"
INVALID_INGREDIENTS = "INVALID_INGREDIENTS"
CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
AI_ERROR = "AI_ERROR"
AI_QUALITY_ERROR = "AI_QUALITY_ERROR"
PROCESSING_ERROR = "PROCESSING_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
TIMEOUT_ERROR = "TIMEOUT_ERROR"
RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"

ERROR_MESSAGES = {
    INVALID_INPUT: "Nieprawidłowe dane wejściowe. Sprawdź składniki i cele makro.",
    UNAUTHORIZED: "Brak autoryzacji. Zaloguj się ponownie.",
    INVALID_TOKEN: "Sesja wygasła. Zaloguj się ponownie.",
    FORBIDDEN: "Brak uprawnień do tej operacji.",
    DATABASE_ERROR: "Błąd bazy danych. Spróbuj ponownie za chwilę.",
    INVALID_INGREDIENTS: "Niektóre składniki nie istnieją w bazie danych.",
    CONFIGURATION_ERROR: (
        "Błąd konfiguracji serwera. Skontaktuj się z administratorem."
    ),
    AI_ERROR: "Błąd AI. Spróbuj ponownie z innymi parametrami.",
    AI_QUALITY_ERROR: (
        "AI próbowało usunąć składniki. Wszystkie składniki muszą zostać "
        "zachowane. Spróbuj ponownie."
    ),
    PROCESSING_ERROR: "Błąd przetwarzania odpowiedzi. Spróbuj ponownie.",
    NETWORK_ERROR: "Błąd sieci. Sprawdź połączenie internetowe.",
    TIMEOUT_ERROR: "Przekroczono limit czasu. Spróbuj ponownie.",
    RATE_LIMIT_ERROR: "Zbyt wiele żądań. Spróbuj ponownie za chwilę.",
    INTERNAL_ERROR: "Wewnętrzny błąd serwera. Spróbuj ponownie za chwilę.",
}
UNKNOWN_ERROR_MESSAGE = "Wystąpił nieoczekiwany błąd. Spróbuj ponownie."

_STATUS_CODES = {401: UNAUTHORIZED, 403: FORBIDDEN, 429: RATE_LIMIT_ERROR}
_RETRYABLE_STATUSES = {429, 500, 502, 503, 504}

MAX_PROTEIN = 500
MAX_FAT = 200
MAX_CARBS = 800


def error_message(code: str) -> str:
    """Return the user-facing message for an error code."""
    return ERROR_MESSAGES.get(code, UNKNOWN_ERROR_MESSAGE)


def validate_request(request: OptimizationRequest) -> str | None:
    """Return a Polish validation message, or None when the request is valid."""
    if not request.user_id:
        return "Brak ID użytkownika"
    if not request.meal_name.strip():
        return "Brak nazwy posiłku"
    targets = request.target_macros
    if not 0 <= targets.protein <= MAX_PROTEIN:
        return f"Nieprawidłowa wartość białka (0-{MAX_PROTEIN}g)"
    if not 0 <= targets.fat <= MAX_FAT:
        return f"Nieprawidłowa wartość tłuszczu (0-{MAX_FAT}g)"
    if not 0 <= targets.carbs <= MAX_CARBS:
        return f"Nieprawidłowa wartość węglowodanów (0-{MAX_CARBS}g)"
    if not request.current_ingredients:
        return "Brak składników do optymalizacji"
    for ingredient in request.current_ingredients:
        if not ingredient.id or not ingredient.name:
            return "Nieprawidłowe dane składnika"
        # Zero grams is allowed for garnish ingredients.
        if ingredient.quantity < 0:
            return "Nieprawidłowa ilość składnika (wartość ujemna)"
    return None


@dataclass
class MacroOptimizationService:
    """Service wrapping the optimization function."""

    client: MacroOptimizationClient
    retry_attempts: int = 2
    retry_delay_seconds: float = 1.0

    async def optimize(self, request: OptimizationRequest) -> OptimizationResponse:
        """Run an optimization; failures come back as an error response."""
        problem = validate_request(request)
        if problem is not None:
            _logger.warning(
                "Invalid optimization request for %r: %s", request.meal_name, problem
            )
            return _failure(INVALID_INPUT, problem)

        payload = request.model_dump(mode="json", exclude_none=True)
        attempt = 0
        while True:
            try:
                body = await self.client.optimize(payload)
                break
            except httpx.HTTPStatusError as exc:
                failure = _failure_from_status(exc.response)
                retryable = exc.response.status_code in _RETRYABLE_STATUSES
            except httpx.TimeoutException:
                failure = _failure(TIMEOUT_ERROR)
                retryable = True
            except httpx.TransportError as exc:
                failure = _failure(NETWORK_ERROR, details=str(exc))
                retryable = True

            attempt += 1
            _logger.warning(
                "Optimization failed (attempt %s/%s): %s",
                attempt,
                self.retry_attempts + 1,
                failure.error.code if failure.error else "n/a",
            )
            if not retryable or attempt > self.retry_attempts:
                return failure
            await asyncio.sleep(self.retry_delay_seconds * 2 ** (attempt - 1))

        try:
            response = OptimizationResponse.model_validate(body)
        except ValidationError as exc:
            _logger.error("Unexpected optimization response: %s", exc)
            return _failure(PROCESSING_ERROR, details=str(exc))
        if response.success and response.data is not None:
            _logger.info(
                "Optimized %r: %s ingredients",
                request.meal_name,
                len(response.data.optimized_ingredients),
            )
        return response


def _failure(
    code: str, message: str | None = None, details: str | None = None
) -> OptimizationResponse:
    return OptimizationResponse(
        success=False,
        error=OptimizationError(
            code=code, message=message or error_message(code), details=details
        ),
    )


def _failure_from_status(response: httpx.Response) -> OptimizationResponse:
    """Prefer the error reported by the function, else map the HTTP status."""
    text = response.text
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        code = error.get("code")
        if code:
            return _failure(str(code), error.get("message"), error.get("details"))

    code = _STATUS_CODES.get(response.status_code, INTERNAL_ERROR)
    return _failure(
        code,
        f"{error_message(code)} (HTTP {response.status_code}: {text[:100]})",
    )
