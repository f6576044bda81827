"""
LLM invocation for scenario insights.

Configurable via OPENAI_API_KEY (and optionally OPENAI_BASE_URL / INSIGHTS_MODEL
for OpenAI-compatible gateways). Without a key a stub response is returned so
the endpoint still works end to end. Deterministic temperature, no tool calls.

This module is the only place that calls an external LLM. Output is advisory.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any

from openai import OpenAI

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

STUB_SUMMARY = (
    "AI insights are disabled. Set OPENAI_API_KEY in the environment where the API server runs "
    "to enable them. The computed scenarios above are unaffected."
)

_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "to_reach_first": {"type": "string"},
        "to_maintain_first": {"type": ["string", "null"]},
        "to_avoid_drop": {"type": "string"},
        "strategic_insights": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["summary", "to_reach_first", "to_maintain_first", "to_avoid_drop", "strategic_insights"],
    "additionalProperties": False,
}


def _get_client() -> OpenAI | None:
    """OpenAI client if an API key is configured, else None (caller uses the stub)."""
    api_key = os.environ.get("OPENAI_API_KEY", "").strip()
    if not api_key:
        return None
    base_url = os.environ.get("OPENAI_BASE_URL", "").strip() or None
    return OpenAI(api_key=api_key, base_url=base_url)


def stub_response() -> dict[str, Any]:
    return {
        "summary": STUB_SUMMARY,
        "to_reach_first": "",
        "to_maintain_first": None,
        "to_avoid_drop": "",
        "strategic_insights": [],
    }


def call_llm(messages: list[dict[str, str]]) -> tuple[dict[str, Any], bool]:
    """
    Returns (fields, from_llm). fields always has the keys of _RESPONSE_SCHEMA.
    Without a configured client, returns the stub and False.
    """
    client = _get_client()
    if client is None:
        return stub_response(), False

    response = client.chat.completions.create(
        model=os.environ.get("INSIGHTS_MODEL", DEFAULT_MODEL),
        messages=messages,
        temperature=0,
        response_format={
            "type": "json_schema",
            "json_schema": {"name": "scenario_insights", "strict": True, "schema": _RESPONSE_SCHEMA},
        },
        max_tokens=1024,
    )
    content = response.choices[0].message.content
    if not content:
        return {**stub_response(), "summary": "No insights could be generated."}, True
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Unparsable insight response: %s", e)
        return {**stub_response(), "summary": "The insights could not be parsed."}, True

    insights = data.get("strategic_insights") or []
    if not isinstance(insights, list):
        insights = [str(insights)]
    return {
        "summary": str(data.get("summary") or "").strip() or "No summary generated.",
        "to_reach_first": str(data.get("to_reach_first") or "").strip(),
        "to_maintain_first": data.get("to_maintain_first") or None,
        "to_avoid_drop": str(data.get("to_avoid_drop") or "").strip(),
        "strategic_insights": [str(i).strip() for i in insights if i],
    }, True
