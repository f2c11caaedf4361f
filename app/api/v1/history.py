from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from app.core import history_store
from app.core.security import optional_user
from app.schemas.resume import HistoryEntry, SuccessResponse

router = APIRouter()


def _owner(user: dict[str, Any] | None) -> str:
    return user["id"] if user else history_store.ANONYMOUS_USER_ID


@router.get("/history", response_model=list[HistoryEntry])
async def list_history(user: dict[str, Any] | None = Depends(optional_user)):
    return history_store.list_history(_owner(user))


@router.get("/history/{entry_id}", response_model=HistoryEntry)
async def get_history_item(entry_id: str, user: dict[str, Any] | None = Depends(optional_user)):
    entry = history_store.get_history_entry(_owner(user), entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History item not found")
    return entry


@router.delete("/history/{entry_id}", response_model=SuccessResponse)
async def delete_history_item(entry_id: str, user: dict[str, Any] | None = Depends(optional_user)):
    history_store.delete_history_entry(_owner(user), entry_id)
    return SuccessResponse()


@router.delete("/history", response_model=SuccessResponse)
async def clear_history(user: dict[str, Any] | None = Depends(optional_user)):
    history_store.clear_history(_owner(user))
    return SuccessResponse()
