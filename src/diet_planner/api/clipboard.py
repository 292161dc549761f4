"""Meal and day clipboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from diet_planner.api.dependencies import (
    get_registry,
    require_api_token,
    require_client_access,
)
from diet_planner.api.schemas import CopyDayRequest, CopyMealRequest, PasteRequest
from diet_planner.domain.diet import day_plan_to_dict, meal_to_dict

router = APIRouter(
    prefix="/clients/{client_id}/clipboard",
    tags=["clipboard"],
    dependencies=[Depends(require_api_token), Depends(require_client_access)],
)

_NOTHING_TO_PASTE = "Nothing to paste"


@router.post("/meal")
async def copy_meal(
    client_id: str, payload: CopyMealRequest, request: Request
) -> dict[str, object]:
    """Copy a meal to the client's clipboard."""
    clipboard = get_registry(request).session(client_id).meal_clipboard
    clipboard.copy(payload.meal.to_domain(), payload.day_id, payload.order_index)
    return {
        "can_paste": clipboard.can_paste,
        "source_day_id": clipboard.state.source_day_id,
        "source_order_index": clipboard.state.source_order_index,
    }


@router.post("/meal/paste")
async def paste_meal(
    client_id: str, request: Request, payload: PasteRequest | None = None
) -> dict[str, object]:
    """Return a fresh copy of the clipboard meal."""
    clipboard = get_registry(request).session(client_id).meal_clipboard
    target_day_id = payload.target_day_id if payload else None
    meal = clipboard.paste(target_day_id)
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOTHING_TO_PASTE)
    return {"meal": meal_to_dict(meal), "target_day_id": target_day_id}


@router.delete("/meal")
async def clear_meal(client_id: str, request: Request) -> dict[str, bool]:
    """Empty the meal clipboard."""
    clipboard = get_registry(request).session(client_id).meal_clipboard
    clipboard.clear()
    return {"can_paste": clipboard.can_paste}


@router.post("/day")
async def copy_day(
    client_id: str, payload: CopyDayRequest, request: Request
) -> dict[str, object]:
    """Copy a whole day to the client's clipboard."""
    clipboard = get_registry(request).session(client_id).day_clipboard
    clipboard.copy(payload.day_plan.to_domain())
    return {"can_paste": clipboard.can_paste, "source_day_id": clipboard.state.source_day_id}


@router.post("/day/paste")
async def paste_day(client_id: str, request: Request) -> dict[str, object]:
    """Return a fresh copy of the clipboard day."""
    clipboard = get_registry(request).session(client_id).day_clipboard
    day_plan = clipboard.paste()
    if day_plan is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOTHING_TO_PASTE)
    return {"day_plan": day_plan_to_dict(day_plan)}


@router.delete("/day")
async def clear_day(client_id: str, request: Request) -> dict[str, bool]:
    """Empty the day clipboard."""
    clipboard = get_registry(request).session(client_id).day_clipboard
    clipboard.clear()
    return {"can_paste": clipboard.can_paste}
