"""Tests for best-effort structured query extraction."""

import json

import httpx
import pytest

from core.llm_client import CompletionTimeout
from core.query_extractor import (
    build_extraction_prompt,
    extract_structured_query,
    parse_structured_query,
)
from helpers import FakeCompletion
from model.decision import StructuredQuery

QUERY = "46-year-old male, knee surgery in Pune, 3-month-old policy"
GOOD = {
    "age": 46,
    "gender": "male",
    "procedure": "knee surgery",
    "location": "Pune",
    "policy_duration": "3 months",
}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ["", "I'm sorry, I can't help with that.", "{not json", "[1, 2, 3]", '"just a string"', "null"],
)
async def test_garbage_output_gives_empty_query(raw):
    result = await extract_structured_query(QUERY, FakeCompletion(extract=raw))
    assert result == StructuredQuery()
    assert result.is_empty()


@pytest.mark.asyncio
async def test_fenced_json_is_parsed():
    raw = "```json\n" + json.dumps(GOOD) + "\n```"
    result = await extract_structured_query(QUERY, FakeCompletion(extract=raw))
    assert result.model_dump() == GOOD


@pytest.mark.asyncio
async def test_called_deterministically_with_small_budget():
    completion = FakeCompletion(extract=json.dumps(GOOD))
    await extract_structured_query(QUERY, completion)
    [call] = completion.calls
    assert call["temperature"] == 0.0
    assert call["max_tokens"] == 200
    assert QUERY in call["prompt"]
    assert '"policy_duration"' in call["prompt"]


@pytest.mark.asyncio
async def test_timeout_gives_empty_query():
    completion = FakeCompletion(extract=CompletionTimeout("slow"))
    assert (await extract_structured_query(QUERY, completion)).is_empty()


@pytest.mark.asyncio
async def test_transport_errors_propagate():
    completion = FakeCompletion(extract=httpx.ConnectError("down"))
    with pytest.raises(httpx.ConnectError):
        await extract_structured_query(QUERY, completion)


def test_partial_and_odd_fields_are_normalized():
    raw = json.dumps(
        {
            "age": "46 years",
            "gender": "M",
            "procedure": "  ",
            "location": "Pune",
            "policy_duration": 3,
            "extra": "ignored",
        }
    )
    outcome = parse_structured_query(raw)
    assert not outcome.fallback
    assert outcome.value.model_dump() == {
        "age": 46,
        "gender": None,
        "procedure": None,
        "location": "Pune",
        "policy_duration": "3",
    }


def test_gender_is_case_insensitive():
    assert parse_structured_query('{"gender": "Female"}').value.gender == "female"


def test_fallback_reason_is_reported():
    outcome = parse_structured_query("nope")
    assert outcome.fallback and outcome.reason == "invalid_json"
    outcome = parse_structured_query("[]")
    assert outcome.fallback and outcome.reason == "not_object"


def test_prompt_quotes_the_query():
    prompt = build_extraction_prompt("knee surgery")
    assert prompt.endswith('"""knee surgery"""\n')


@pytest.mark.asyncio
async def test_deeply_nested_output_gives_empty_query():
    result = await extract_structured_query(QUERY, FakeCompletion(extract="[" * 5000))
    assert result.is_empty()
