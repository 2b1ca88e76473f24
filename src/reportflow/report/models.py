"""
Report payload contracts — what the pipeline steps pass to each other.

Field names on the wire are PascalCase (Title, Sections, SearchKeywords,
Content); Python attributes are snake_case. Models are frozen.
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, ConfigDict, Field

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json fence some models add to JSON replies."""
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1) if match else text


class _Contract(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def from_json(cls, text: str):
        """Parse a JSON document; raises pydantic.ValidationError on bad input."""
        return cls.model_validate_json(strip_code_fence(text))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class SectionPlan(_Contract):
    """One planned section and what to search for to write it."""

    title: str = Field(alias="Title", description="The title of the section.")
    search_keywords: str = Field(
        alias="SearchKeywords", description="The search keywords to write this content."
    )


class ReportPlan(_Contract):
    """Title plus ordered section outline produced by the planner."""

    title: str = Field(alias="Title", description="The title of the report.")
    sections: tuple[SectionPlan, ...] = Field(
        alias="Sections", description="The sections of the report."
    )


class Section(_Contract):
    """A written section."""

    title: str = Field(alias="Title", description="The title of the section.")
    content: str = Field(alias="Content", description="The content of the section.")


def sections_to_json(sections: list[Section]) -> str:
    """Serialize a section list with wire field names."""
    return json.dumps(
        [section.model_dump(by_alias=True) for section in sections],
        ensure_ascii=False,
    )
