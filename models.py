from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DIZZYLAB_BASE_URL = "https://www.dizzylab.net"

# Upstream sends null for some fields it has no value for
_FIELD_DEFAULTS = {
    "title": "",
    "cover": "",
    "label": "",
    "label_id": 0,
    "label_cover": "",
    "comment": "",
    "only_has_gift": False,
}


class Disc(BaseModel):
    """Model for a single disc in a dizzylab collection"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str = ""
    cover: str = ""  # Empty string means no image
    label: str = ""
    label_id: int = Field(default=0, alias="labelid")  # 0 means unknown
    label_cover: str = Field(default="", alias="labelcover")
    comment: str = ""
    only_has_gift: bool = Field(default=False, alias="onlyhavegift")
    boost: Optional[Union[int, float]] = None  # None means not applicable
    promo_link: Optional[str] = Field(default=None, alias="promolink")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator(
        "title", "cover", "label", "label_id", "label_cover", "comment", "only_has_gift",
        mode="before",
    )
    @classmethod
    def _null_to_default(cls, value: Any, info) -> Any:
        if value is None:
            return _FIELD_DEFAULTS[info.field_name]
        return value

    @property
    def link(self) -> str:
        """Promo link when present, otherwise the canonical detail page"""
        if self.promo_link:
            return self.promo_link
        return f"{DIZZYLAB_BASE_URL}/d/{self.id}/"

    def to_wire(self) -> dict:
        """Serialize using the upstream key names; promolink only when set"""
        data = self.model_dump(by_alias=True)
        if data["promolink"] is None:
            del data["promolink"]
        return data


class CollectionEntry(BaseModel):
    """Cached disc list for one account"""
    model_config = ConfigDict(frozen=True)

    account_id: str
    discs: tuple[Disc, ...]
    fetched_at: datetime
    ttl_seconds: int


class ErrorResponse(BaseModel):
    """Response model for API errors"""
    error: str


class DiscListResponse(BaseModel):
    """Shape of the upstream bulk listing payload"""
    discs: List[Any]
