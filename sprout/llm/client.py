# -*- coding: utf-8 -*-
"""LLM — chat-completion client and the prompts built on it.

Everything goes through :func:`generate`, a single call to an
OpenAI-compatible ``/chat/completions`` endpoint (Gemini by default).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from ..config import settings
from .parsing import parse_json_array, parse_line_list

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """The language model could not be reached or returned nothing usable."""


@dataclass(frozen=True)
class LLMSettings:
    base_url: str
    api_key: str
    model: str
    timeout: float
    temperature: float
    max_tokens: int


def resolve_llm_settings() -> LLMSettings:
    if not settings.llm_api_key:
        raise LLMError("GEMINI_API_KEY (or LLM_API_KEY) not set")
    return LLMSettings(
        base_url=settings.llm_base_url.rstrip("/"),
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def completions_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    return f"{base}/chat/completions"


def extract_message_text(data: object) -> str:
    """Text of the first choice of a chat-completion response ('' when absent)."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list):
        return ""
    out: list[str] = []
    for choice in choices:
        if not isinstance(choice, dict):
            continue
        msg = choice.get("message")
        if isinstance(msg, dict):
            content = msg.get("content")
            if isinstance(content, str) and content:
                out.append(content)
            elif isinstance(content, list):
                for part in content:
                    if isinstance(part, dict) and isinstance(part.get("text"), str):
                        out.append(part["text"])
        maybe_text = choice.get("text")
        if isinstance(maybe_text, str) and maybe_text:
            out.append(maybe_text)
        if out:
            break
    return "".join(out)


def chat(
    messages: List[Dict[str, Any]],
    *,
    model: Optional[str] = None,
    timeout: Optional[float] = None,
    temperature: Optional[float] = None,
) -> str:
    cfg = resolve_llm_settings()
    payload = {
        "model": model or cfg.model,
        "messages": messages,
        "temperature": cfg.temperature if temperature is None else temperature,
        "max_tokens": cfg.max_tokens,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {cfg.api_key}",
    }
    try:
        with httpx.Client(timeout=timeout or cfg.timeout, follow_redirects=True) as client:
            resp = client.post(completions_url(cfg.base_url), headers=headers, json=payload)
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPStatusError as exc:
        snippet = (exc.response.text or "").replace("\n", " ").strip()[:200]
        raise LLMError(f"LLM API error ({exc.response.status_code}): {snippet}") from exc
    except httpx.HTTPError as exc:
        raise LLMError(f"LLM API unreachable: {exc}") from exc
    except ValueError as exc:
        raise LLMError(f"LLM API returned non-JSON response: {exc}") from exc

    text = extract_message_text(data).strip()
    if not text:
        raise LLMError("LLM returned an empty answer")
    return text


def generate(prompt: str, system: Optional[str] = None, *, temperature: Optional[float] = None) -> str:
    messages: List[Dict[str, Any]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return chat(messages, temperature=temperature)


# ---------- Prompts ----------

_JSON_ONLY = (
    "Return STRICT JSON only. Do NOT wrap in markdown or code fences. "
    "Use double quotes for all keys/strings and no trailing commas."
)


def _prefs_text(prefs: Mapping[str, Any]) -> str:
    level = prefs.get("dietLevel") or "flexitarian"
    extra = ", ".join(prefs.get("extraForbiddenTags") or []) or "none"
    return f"Diet level: {level}\nExtra forbidden ingredients/tags: {extra}"


def extract_ingredients(recipe_text: str) -> List[str]:
    prompt = (
        "Extract ALL ingredients used in the following recipe.\n"
        "Ingredients may appear in a list OR inside the steps.\n\n"
        "Return ONLY a plain list, one ingredient per line.\n"
        "No numbering. No explanations. No extra text.\n\n"
        f'Recipe:\n"""\n{recipe_text}\n"""\n\n'
        "Example output:\ntomato\nolive oil\nsalt\ngarlic\n"
    )
    return parse_line_list(generate(prompt, temperature=0.0))


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        s = value.strip()
        return [s] if s else []
    if isinstance(value, list):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [str(value).strip()]


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def normalize_recipe(raw: Mapping[str, Any]) -> Dict[str, Any]:
    ingredients: List[Dict[str, Any]] = []
    for ing in raw.get("ingredients") or []:
        if isinstance(ing, str):
            if ing.strip():
                ingredients.append({"name": ing.strip(), "amount": "", "unit": ""})
            continue
        if not isinstance(ing, dict):
            continue
        name = _opt_str(ing.get("name") or ing.get("ingredient"))
        if not name:
            continue
        ingredients.append({
            "name": name,
            "amount": _opt_str(ing.get("amount") or ing.get("quantity")) or "",
            "unit": _opt_str(ing.get("unit")) or "",
        })
    return {
        "title": _opt_str(raw.get("title") or raw.get("name")) or "Untitled",
        "tags": _as_str_list(raw.get("tags")),
        "duration": _opt_str(raw.get("duration") or raw.get("time")) or "",
        "ingredients": ingredients,
        "steps": _as_str_list(raw.get("steps") or raw.get("instructions")),
        "previewImageUrl": _opt_str(raw.get("previewImageUrl")) or "",
    }


def generate_recipes(ingredients: Iterable[str], count: int = 3, prefs: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    items = [i for i in ingredients if i]
    prompt = (
        f"Create {count} simple plant-forward recipes using mainly these ingredients: "
        f"{', '.join(items)}.\n"
        + (f"{_prefs_text(prefs)}\n" if prefs else "")
        + "Output a JSON array; each element:\n"
        '{"title": "string", "tags": ["string"], "duration": "string", '
        '"ingredients": [{"name": "string", "amount": "string", "unit": "string"}], '
        '"steps": ["string"]}\n'
    )
    content = generate(prompt, system=f"You are a helpful cooking assistant. {_JSON_ONLY}")
    try:
        parsed = parse_json_array(content)
    except ValueError as exc:
        logger.warning("recipe generation output parse failed: %s", exc, exc_info=True)
        return []
    return [normalize_recipe(r) for r in parsed if isinstance(r, dict)][:count]


def rewrite_recipe_steps(substitutions: Iterable[Mapping[str, str]], recipe_text: str) -> str:
    lines = [
        f'Replace "{s.get("original")}" with "{s.get("substitute")}".'
        for s in substitutions
        if s.get("original") and s.get("substitute")
    ]
    prompt = (
        "You are a helpful assistant that rewrites recipe steps.\n"
        f'Original recipe:\n"""\n{recipe_text}\n"""\n\n'
        "Instructions:\n"
        + ("\n".join(lines) or "Keep the ingredients as they are.")
        + "\n\nRewrite the recipe steps incorporating the substitutions naturally. "
        "Return one step per line, no extra commentary."
    )
    return generate(prompt)


def classify_ingredients(prefs: Mapping[str, Any], ingredients: List[str]) -> List[Dict[str, Any]]:
    if not ingredients:
        return []
    prompt = (
        f"{_prefs_text(prefs)}\n\n"
        "For each ingredient below decide whether it fits the diet.\n"
        'Answer with a JSON array of {"ingredient": "string", '
        '"allowed": "Allowed" | "NotAllowed" | "Ambiguous", "reason": "string", '
        '"suggestions": ["string"]}, one element per ingredient, same order.\n\n'
        "Ingredients:\n" + "\n".join(ingredients)
    )
    content = generate(prompt, system=f"You are a careful dietitian. {_JSON_ONLY}", temperature=0.0)
    try:
        parsed = parse_json_array(content)
    except ValueError as exc:
        logger.warning("ingredient classification parse failed: %s", exc, exc_info=True)
        return []
    out: List[Dict[str, Any]] = []
    for row in parsed:
        if not isinstance(row, dict):
            continue
        name = _opt_str(row.get("ingredient") or row.get("name"))
        if not name:
            continue
        out.append({
            "ingredient": name,
            "allowed": str(row.get("allowed") or row.get("status") or ""),
            "reason": _opt_str(row.get("reason")) or "",
            "suggestions": _as_str_list(row.get("suggestions")),
        })
    return out


def classify_menu(prefs: Mapping[str, Any], dishes: List[str]) -> List[Dict[str, Any]]:
    if not dishes:
        return []
    prompt = (
        f"{_prefs_text(prefs)}\n\n"
        "For each menu dish below decide whether it fits the diet.\n"
        'Answer with a JSON array of {"name": "string", '
        '"status": "compatible" | "modifiable" | "incompatible", '
        '"modificationSuggestion": "string|null"}.\n\n'
        "Dishes:\n" + "\n".join(dishes)
    )
    content = generate(prompt, system=f"You are a careful dietitian. {_JSON_ONLY}", temperature=0.0)
    try:
        parsed = parse_json_array(content)
    except ValueError as exc:
        logger.warning("menu classification parse failed: %s", exc, exc_info=True)
        return []
    out: List[Dict[str, Any]] = []
    for row in parsed:
        if not isinstance(row, dict) or not _opt_str(row.get("name")):
            continue
        out.append({
            "name": _opt_str(row.get("name")),
            "status": (_opt_str(row.get("status")) or "modifiable").lower(),
            "modificationSuggestion": _opt_str(row.get("modificationSuggestion")),
        })
    return out


def suggest_alternatives(prefs: Mapping[str, Any], product_type: str, context: Optional[str] = None) -> List[str]:
    prompt = (
        f"{_prefs_text(prefs)}\n\n"
        f"Suggest up to 5 store-bought alternatives to: {product_type}.\n"
        + (f"Context: {context}\n" if context else "")
        + "Return ONLY a plain list, one product per line."
    )
    return parse_line_list(generate(prompt))[:5]


def answer_with_context(context: Mapping[str, Any], question: str) -> str:
    system = (
        "You are Sprout, a friendly plant-based cooking and nutrition assistant. "
        "Respect the user's diet level and forbidden ingredients from the JSON context. "
        "Be concise and practical."
    )
    context_str = json.dumps(context, ensure_ascii=False)
    return generate(f"Context (JSON):\n{context_str}\n\nQuestion:\n{question}", system=system)
