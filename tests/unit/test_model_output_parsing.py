import pytest

from gradtrack.errors import ModelOutputError
from gradtrack.llm.autofill import normalize_autofill
from gradtrack.llm.providers import parse_json, parse_tool_arguments


def test_parse_json_prefers_fenced_block() -> None:
    content = 'Sure, here it is:\n```json\n{"ranking": 37, "website": null}\n```\nAnything else?'
    assert parse_json(content) == {"ranking": 37, "website": None}


def test_parse_json_extracts_object_from_prose() -> None:
    content = 'The data is {"tuition_fees": "1,500 CHF"} as requested.'
    assert parse_json(content) == {"tuition_fees": "1,500 CHF"}


@pytest.mark.parametrize("content", ["", "no json here", "{not valid}", "[1, 2, 3]"])
def test_parse_json_rejects_unusable_output(content: str) -> None:
    with pytest.raises(ModelOutputError):
        parse_json(content)


def test_parse_tool_arguments_treats_blank_as_empty() -> None:
    assert parse_tool_arguments(None) == {}
    assert parse_tool_arguments("  ") == {}
    assert parse_tool_arguments('{"days": 14}') == {"days": 14}


def test_normalize_autofill_cleans_model_values() -> None:
    values = normalize_autofill(
        {
            "website": " https://www.tum.de ",
            "ranking": "#37 (QS 2025)",
            "tuition_fees": "",
            "requirements": ["Bachelor in CS", "IELTS 6.5"],
            "unexpected": "ignored",
        }
    )

    assert values == {
        "website": "https://www.tum.de",
        "ranking": 37,
        "tuition_fees": None,
        "requirements": "Bachelor in CS\nIELTS 6.5",
        "notes": None,
    }


def test_normalize_autofill_drops_unparseable_ranking() -> None:
    assert normalize_autofill({"ranking": "not ranked"})["ranking"] is None
