"""
Thin wrapper over the Bedrock converse API.

Every AI feature builds a prompt, calls ask_for_json and falls back to its
own heuristic when this module raises.
"""
import json
import logging
import re
from typing import Any

import boto3
from botocore.config import Config

from app.config import settings

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")


def _candidate_model_ids() -> list[str]:
    model_id = settings.bedrock_llm_model_id
    # "ministral" is a frequent misspelling of "mistral" in model ids.
    if "ministral" in model_id:
        return [model_id, model_id.replace("ministral", "mistral")]
    return [model_id]


def _runtime_client(timeout: float):
    return boto3.client(
        "bedrock-runtime",
        region_name=settings.aws_region,
        config=Config(read_timeout=int(timeout), connect_timeout=10, retries={"max_attempts": 2}),
    )


def _reply_text(response: dict) -> str:
    blocks = ((response.get("output") or {}).get("message") or {}).get("content") or []
    return "".join(b.get("text", "") for b in blocks if isinstance(b, dict)).strip()


def _call_bedrock_llm(prompt: str, timeout: float = 60.0, max_tokens: int | None = None) -> str:
    client = _runtime_client(timeout)
    inference = {
        "maxTokens": max_tokens or settings.bedrock_llm_max_tokens,
        "temperature": settings.bedrock_llm_temperature,
    }
    errors = []
    for model_id in _candidate_model_ids():
        try:
            response = client.converse(
                modelId=model_id,
                messages=[{"role": "user", "content": [{"text": prompt}]}],
                inferenceConfig=inference,
            )
        except Exception as e:
            logger.warning("Bedrock converse failed model=%s: %s", model_id, e)
            errors.append(e)
            continue
        text = _reply_text(response)
        logger.debug("Bedrock reply model=%s chars=%d", model_id, len(text))
        return text
    raise errors[-1]


def is_llm_enabled() -> bool:
    return bool(settings.bedrock_llm_enabled and settings.bedrock_llm_model_id and settings.aws_region)


def call_llm(prompt: str, timeout: float = 60.0, max_tokens: int | None = None) -> str:
    """Single model call. Raises when the LLM is disabled or the call fails."""
    if not is_llm_enabled():
        raise RuntimeError("LLM is disabled")
    return _call_bedrock_llm(prompt, timeout=timeout, max_tokens=max_tokens)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        obj = json.loads(text)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """
    Pull a JSON object out of a model reply.
    Tries the whole text first, then the outermost {...} span (models often wrap JSON in prose or fences).
    """
    if not text:
        return None
    clean = _FENCE_CLOSE_RE.sub("", _FENCE_OPEN_RE.sub("", text.strip())).strip()
    obj = _loads_object(clean)
    if obj is not None or clean.startswith("["):
        return obj
    match = _JSON_OBJECT_RE.search(clean)
    if not match:
        return None
    obj = _loads_object(match.group(0))
    if obj is None:
        logger.warning("LLM reply contained an unparseable JSON span (%d chars)", len(match.group(0)))
    return obj


def ask_for_json(prompt: str, timeout: float = 60.0, max_tokens: int | None = None) -> dict[str, Any]:
    """Call the model and return the parsed JSON object. Raises ValueError when none is found."""
    obj = extract_json_object(call_llm(prompt, timeout=timeout, max_tokens=max_tokens))
    if obj is None:
        raise ValueError("No JSON object in LLM response")
    return obj
