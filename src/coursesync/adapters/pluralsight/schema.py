"""Pydantic models describing the Pluralsight ``courseCatalog`` GraphQL payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coursesync.adapters.coercion import LooseFloat, LooseText

COURSE_CATALOG_QUERY = """
query CourseCatalog($first: Int!, $after: String) {
  courseCatalog(first: $first, after: $after) {
    totalCount
    pageInfo { hasNextPage endCursor }
    nodes {
      id
      idNum
      slug
      url
      title
      level
      description
      shortDescription
      courseSeconds
      releasedDate
      displayDate
      publishedDate
      language
    }
  }
}
"""


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class PluralsightBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GraphQLError(PluralsightBaseModel):
    message: LooseText = ""


class CatalogData(PluralsightBaseModel):
    course_catalog: dict[str, Any] | None = Field(default=None, alias="courseCatalog")


class CourseCatalogResponse(PluralsightBaseModel):
    data: CatalogData | None = None
    errors: list[GraphQLError] = Field(default_factory=list)

    _normalize_errors = field_validator("errors", mode="before")(_none_to_list)


class CourseNode(PluralsightBaseModel):
    id: LooseText = ""
    id_num: int = Field(default=0, alias="idNum")
    slug: LooseText = ""
    url: LooseText = ""
    title: LooseText = ""
    level: LooseText = ""
    description: LooseText = ""
    short_description: LooseText = Field(default="", alias="shortDescription")
    course_seconds: LooseFloat = Field(default=0.0, alias="courseSeconds")
    released_date: LooseText = Field(default="", alias="releasedDate")
    display_date: LooseText = Field(default="", alias="displayDate")
    published_date: LooseText = Field(default="", alias="publishedDate")
    language: LooseText = ""

    @field_validator("id_num", mode="before")
    @classmethod
    def _parse_id_num(cls, value: object) -> int:
        if value is None or value == "":
            return 0
        return int(value)  # type: ignore[arg-type]

    @property
    def stable_id(self) -> str:
        """Numeric id when present, then the GraphQL id, then the slug."""

        if self.id_num > 0:
            return str(self.id_num)
        return self.id.strip() or self.slug.strip()
