"""Pydantic models describing Udemy Business ``courses/list`` payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coursesync.adapters.coercion import LooseFloat, LooseText, coerce_text

IMAGE_KEYS = (
    "size_480x270",
    "image_480x270",
    "size_240x135",
    "image_240x135",
    "size_125_H",
    "image_125_H",
)


class UdemyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CategoryPayload(UdemyBaseModel):
    title: LooseText = ""
    name: LooseText = ""

    @property
    def label(self) -> str:
        return self.title.strip() or self.name.strip()


class CoursePayload(UdemyBaseModel):
    id: LooseText
    title: LooseText = ""
    url: LooseText = ""
    description: LooseText = ""
    language: LooseText = ""
    estimated_content_length: LooseFloat = 0.0
    locale: LooseText = ""
    last_update_date: LooseText = ""
    level: LooseText = ""
    categories: list[CategoryPayload] = Field(default_factory=list)
    images: dict[str, Any] = Field(default_factory=dict)

    @field_validator("categories", mode="before")
    @classmethod
    def _wrap_categories(cls, value: object) -> object:
        # Tenants send a bare title, a single object or a list of either.
        if value is None:
            return []
        if isinstance(value, str | Mapping):
            value = [value]
        if isinstance(value, list):
            return [{"title": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("locale", mode="before")
    @classmethod
    def _prefer_locale_code(cls, value: object) -> object:
        if isinstance(value, Mapping):
            return value.get("locale") or value.get("code") or value
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _drop_non_mapping_images(cls, value: object) -> object:
        return value if isinstance(value, Mapping) else {}

    @property
    def image_url(self) -> str:
        for key in IMAGE_KEYS:
            candidate = coerce_text(self.images.get(key)).strip()
            if candidate:
                return candidate
        return ""
