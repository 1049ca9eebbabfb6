"""Verdict LLM -- turns gathered search context into a truth decision.

Default model: gpt-4o-mini (configurable via OPENAI_VERDICT_MODEL).
"""

import json
from typing import Any, Dict

from truthseek.llm.base import BaseLLM
from truthseek.utils.config import settings
from truthseek.utils.logger import get_logger

log = get_logger(__name__)

VERDICTS = ("TRUE", "FALSE", "UNCERTAIN")

VERDICT_PROMPT = """You are a careful fact checker. Decide whether the claim below is true, using only the search findings provided.

Claim: {claim}

Search findings:
{context}

Return JSON with:
- verdict: TRUE, FALSE or UNCERTAIN
- confidence: number between 0 and 1
- reasoning: two or three sentences citing the findings

Format: Valid JSON only, no explanation."""


class VerdictLLM(BaseLLM):
    """Generate a decision for a claim from search context."""

    def __init__(self, model: str | None = None, **kwargs):
        super().__init__(model=model or settings.verdict_model, **kwargs)

    async def generate_decision(self, claim: str, context: str) -> Dict[str, Any]:
        user_content = VERDICT_PROMPT.format(claim=claim, context=context or "(no findings)")
        messages = [{"role": "user", "content": user_content}]
        raw = await self.complete(messages, temperature=0.0)
        if not raw:
            return _fallback("model returned no answer")
        try:
            decision = json.loads(_strip_fences(raw))
        except json.JSONDecodeError:
            log.warning("Verdict model returned non-JSON: %s", raw[:200])
            return _fallback("model returned non-JSON output")
        return _clean(decision)


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


def _clean(decision: Any) -> Dict[str, Any]:
    if not isinstance(decision, dict):
        return _fallback("model returned an unexpected shape")
    verdict = str(decision.get("verdict", "")).upper()
    if verdict not in VERDICTS:
        verdict = "UNCERTAIN"
    try:
        confidence = min(1.0, max(0.0, float(decision.get("confidence", 0.0))))
    except (TypeError, ValueError):
        confidence = 0.0
    return {
        "verdict": verdict,
        "confidence": confidence,
        "reasoning": str(decision.get("reasoning", "")),
    }


def _fallback(reason: str) -> Dict[str, Any]:
    """Return a safe default when the verdict model fails."""
    return {"verdict": "UNCERTAIN", "confidence": 0.0, "reasoning": reason}
