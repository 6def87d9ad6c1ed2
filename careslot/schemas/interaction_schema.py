"""Interaction API response models for likes, saves and favorites."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToggleData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    likes: Optional[list[Any]] = None
    saved_by: Optional[list[Any]] = None
    is_favorite: Optional[bool] = Field(default=None, alias="isFavorite")
    count: Optional[int] = None


class ToggleResponse(BaseModel):
    """Envelope returned by every toggle endpoint."""
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    message: Optional[str] = None
    data: Optional[ToggleData] = None


def participant_ids(raw: Optional[list[Any]]) -> Optional[frozenset[str]]:
    """Normalize a participant list of ids or ``{_id: ...}`` objects."""
    if raw is None:
        return None
    ids = set()
    for item in raw:
        if isinstance(item, dict):
            ref = item.get("_id") or item.get("id")
            if ref is not None:
                ids.add(str(ref))
        else:
            ids.add(str(item))
    return frozenset(ids)
