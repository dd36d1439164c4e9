"""Argument models for the tool handlers."""

from __future__ import annotations

from typing import Any, Literal, Optional, TypeVar, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from ads_bridge._exceptions import ValidationError

__all__ = [
    "NoArguments",
    "PaginationArgs",
    "AccountDetailsArgs",
    "TimeRange",
    "InsightsArgs",
    "ActivitiesArgs",
    "CreativesArgs",
    "ThumbnailsArgs",
    "validate_args",
]

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Arguments(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NoArguments(_Arguments):
    pass


class PaginationArgs(_Arguments):
    url: str

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL format")
        return value


class AccountDetailsArgs(_Arguments):
    act_id: str = Field(min_length=1)
    fields: Optional[list[str]] = None


class TimeRange(_Arguments):
    since: str
    until: str


class InsightsArgs(_Arguments):
    act_id: str = Field(min_length=1)
    fields: list[str] = Field(min_length=1)
    date_preset: Optional[str] = None
    level: Optional[Literal["account", "campaign", "adset", "ad"]] = None
    action_attribution_windows: Optional[list[str]] = None
    action_breakdowns: Optional[list[str]] = None
    breakdowns: Optional[list[str]] = None
    time_range: Optional[TimeRange] = None
    time_increment: Optional[Union[int, str]] = None
    limit: Optional[PositiveInt] = None
    sort: Optional[str] = None
    after: Optional[str] = None
    before: Optional[str] = None


class ActivitiesArgs(_Arguments):
    act_id: str = Field(min_length=1)
    fields: Optional[list[str]] = None
    since: Optional[str] = None
    until: Optional[str] = None
    time_range: Optional[TimeRange] = None
    limit: Optional[PositiveInt] = None
    after: Optional[str] = None
    before: Optional[str] = None


class CreativesArgs(_Arguments):
    ad_ids: list[str] = Field(min_length=1)
    include_images: bool = True


class ThumbnailsArgs(_Arguments):
    ad_ids: list[str] = Field(min_length=1)
    resolution: Literal["thumbnail", "full", "all"] = "all"
    include_ad_details: bool = True
    max_image_size_mb: float = Field(default=5, ge=0.1, le=10)


def validate_args(model: type[ModelT], args: Any) -> ModelT:
    """Validate *args* against *model*, raising ``ValidationError`` with one message per field."""
    try:
        return model.model_validate(args if args is not None else {})
    except PydanticValidationError as exc:
        messages = []
        for error in exc.errors():
            path = ".".join(str(part) for part in error["loc"])
            messages.append(f"{path}: {error['msg']}" if path else error["msg"])
        raise ValidationError(messages, original_exc=exc) from exc
