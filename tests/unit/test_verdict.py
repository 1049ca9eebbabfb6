"""Unit tests for the VerdictLLM."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from truthseek.llm.verdict import VerdictLLM


def _completion(text):
    resp = MagicMock()
    resp.choices = [MagicMock()]
    resp.choices[0].message.content = text
    return resp


def _decide(reply=None, error=None):
    with patch("truthseek.llm.base.AsyncOpenAI") as mock_cls:
        mock_client = MagicMock()
        mock_cls.return_value = mock_client
        mock_client.chat.completions.create = AsyncMock(
            return_value=_completion(reply), side_effect=error
        )
        llm = VerdictLLM(api_key="sk-test")
        decision = asyncio.run(llm.generate_decision("The sky is green", "findings"))
        return decision, mock_client.chat.completions.create


def test_parses_json_decision():
    decision, create = _decide('{"verdict": "false", "confidence": 0.93, "reasoning": "Sky is blue."}')
    assert decision == {"verdict": "FALSE", "confidence": 0.93, "reasoning": "Sky is blue."}
    kwargs = create.call_args.kwargs
    assert kwargs["temperature"] == 0.0
    assert "The sky is green" in kwargs["messages"][0]["content"]


def test_code_fenced_json_is_accepted():
    decision, _ = _decide('```json\n{"verdict": "TRUE", "confidence": 2, "reasoning": "ok"}\n```')
    assert decision["verdict"] == "TRUE"
    assert decision["confidence"] == 1.0


def test_unknown_verdict_becomes_uncertain():
    decision, _ = _decide('{"verdict": "MAYBE", "confidence": "high"}')
    assert decision["verdict"] == "UNCERTAIN"
    assert decision["confidence"] == 0.0


def test_non_json_falls_back():
    decision, _ = _decide("I think it's false.")
    assert decision["verdict"] == "UNCERTAIN"
    assert decision["confidence"] == 0.0


def test_api_failure_falls_back():
    decision, _ = _decide(error=RuntimeError("503"))
    assert decision["verdict"] == "UNCERTAIN"
