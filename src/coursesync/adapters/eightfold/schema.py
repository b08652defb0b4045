"""Pydantic model for course rows returned by the Eightfold core API.

Rows come back with camelCase keys from some tenants and snake_case keys from
others, and text fields may be strings, objects or arrays.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from coursesync.adapters.coercion import LooseFloat, LooseText, LooseTextList


class EightfoldCourseRow(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    system_id: LooseText = Field(default="", validation_alias=AliasChoices("systemId", "system_id"))
    lms_course_id: LooseText = Field(
        default="", validation_alias=AliasChoices("lmsCourseId", "lms_course_id")
    )
    title: LooseText = ""
    description: LooseText = ""
    course_url: LooseText = Field(default="", validation_alias=AliasChoices("courseUrl", "course_url"))
    language: LooseText = ""
    category: LooseText = ""
    difficulty: LooseText = ""
    duration_hours: LooseFloat = Field(
        default=0.0, validation_alias=AliasChoices("durationHours", "duration_hours")
    )
    status: LooseText = ""
    published_date: LooseText = Field(
        default="", validation_alias=AliasChoices("publishedDate", "published_date", "published_ts")
    )
    image_url: LooseText = Field(default="", validation_alias=AliasChoices("imageUrl", "image_url"))
    skills: LooseTextList = ()
