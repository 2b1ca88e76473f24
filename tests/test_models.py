"""Tests for the report payload contracts."""

import json
import random

import pytest
from pydantic import ValidationError

from reportflow.report.models import (
    ReportPlan,
    Section,
    SectionPlan,
    sections_to_json,
    strip_code_fence,
)


def random_text(rng: random.Random, max_len: int = 40) -> str:
    """Random Unicode text without lone surrogates."""
    chars = []
    for _ in range(rng.randint(0, max_len)):
        while True:
            code = rng.choice(
                [rng.randint(0x20, 0x7E), rng.randint(0x00, 0x1F), rng.randint(0xA0, 0x10FFFF)]
            )
            if not 0xD800 <= code <= 0xDFFF:
                break
        chars.append(chr(code))
    return "".join(chars)


# --- Section ---


@pytest.mark.parametrize("seed", range(50))
def test_section_round_trip_random_unicode(seed):
    rng = random.Random(seed)
    section = Section(title=random_text(rng), content=random_text(rng, 400))

    restored = Section.from_json(section.to_json())

    assert restored.title == section.title
    assert restored.content == section.content


@pytest.mark.parametrize(
    "title,content",
    [("", ""), ("C#", "```csharp\nConsole.WriteLine();\n```"), ("猫", "にゃん 🐈"), ('"q"', "a\\b\n")],
)
def test_section_round_trip_edge_values(title, content):
    section = Section(title=title, content=content)
    assert Section.from_json(section.to_json()) == section


def test_section_uses_pascal_case_on_the_wire():
    payload = json.loads(Section(title="Intro", content="Hello").to_json())
    assert payload == {"Title": "Intro", "Content": "Hello"}


def test_section_is_frozen():
    section = Section(title="a", content="b")
    with pytest.raises(ValidationError):
        section.title = "c"


def test_section_rejects_missing_fields():
    with pytest.raises(ValidationError):
        Section.from_json('{"Title": "only title"}')


def test_section_rejects_non_json():
    with pytest.raises(ValidationError):
        Section.from_json("not json at all")


# --- ReportPlan ---


def test_report_plan_parses_wire_format():
    plan = ReportPlan.from_json(
        '{"Title":"C# Basics","Sections":[{"Title":"Intro","SearchKeywords":"C# overview"}]}'
    )
    assert plan.title == "C# Basics"
    assert plan.sections == (SectionPlan(title="Intro", search_keywords="C# overview"),)


def test_report_plan_allows_zero_sections():
    plan = ReportPlan.from_json('{"Title": "Empty", "Sections": []}')
    assert plan.sections == ()


def test_report_plan_keeps_section_order():
    names = ["c", "a", "b"]
    doc = {"Title": "t", "Sections": [{"Title": n, "SearchKeywords": n} for n in names]}
    plan = ReportPlan.from_json(json.dumps(doc))
    assert [s.title for s in plan.sections] == names


def test_report_plan_accepts_python_field_names():
    plan = ReportPlan(title="t", sections=[SectionPlan(title="s", search_keywords="k")])
    assert json.loads(plan.to_json()) == {
        "Title": "t",
        "Sections": [{"Title": "s", "SearchKeywords": "k"}],
    }


def test_report_plan_schema_uses_aliases():
    schema = ReportPlan.model_json_schema(by_alias=True)
    assert set(schema["properties"]) == {"Title", "Sections"}


# --- Helpers ---


class TestStripCodeFence:
    def test_plain_text_unchanged(self):
        assert strip_code_fence('  {"a": 1} ') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n[1, 2]\n```') == "[1, 2]"

    @pytest.mark.parametrize("tag", ["JSON", "Json"])
    def test_fence_tag_is_case_insensitive(self, tag):
        assert strip_code_fence(f'```{tag}\n{{"a": 1}}\n```') == '{"a": 1}'

    def test_uppercase_fenced_section_parses(self):
        section = Section.from_json('```JSON\n{"Title": "Intro", "Content": "Hi"}\n```')
        assert section == Section(title="Intro", content="Hi")


def test_sections_to_json_keeps_order_and_unicode():
    sections = [Section(title="二", content="b"), Section(title="一", content="a")]
    text = sections_to_json(sections)
    assert "二" in text
    assert json.loads(text) == [
        {"Title": "二", "Content": "b"},
        {"Title": "一", "Content": "a"},
    ]


def test_sections_to_json_empty():
    assert sections_to_json([]) == "[]"
