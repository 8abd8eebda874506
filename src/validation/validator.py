"""Validation of provider output into a Recipe.

parse_recipe_response() is all-or-nothing:
1. Extract candidates[0].content.parts[0].text          -> MalformedResponse
2. Parse the text as a JSON object                       -> InvalidJSON
3. Check recipeName, ingredients, instructions,
   prepTimeMinutes in that order                         -> SchemaViolation(field)
4. Normalize lists to ordered lists of str and the time to int
"""

import json
import re
from typing import Any, List

from src.models.models import RawProviderResponse, Recipe
from src.utils.errors import InvalidJSON, MalformedResponse, SchemaViolation
from src.utils.logger import logger

_CODE_FENCE_START = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_CODE_FENCE_END = re.compile(r"\s*```$")


def extract_generated_text(raw: RawProviderResponse) -> str:
    """Return the generated text from the provider envelope.

    Raises:
        MalformedResponse: If the nested text path is absent or empty. The
            message prefers the envelope's error message, then a prompt block
            reason, then a generic description.
    """
    try:
        text = raw["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None

    if isinstance(text, str) and text.strip():
        return text

    message = None
    if isinstance(raw, dict):
        error = raw.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = error["message"]
        feedback = raw.get("promptFeedback")
        if not message and isinstance(feedback, dict) and feedback.get("blockReason"):
            message = f"Prompt was blocked by the AI provider ({feedback['blockReason']})"

    raise MalformedResponse(message)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    txt = text.strip()
    if txt.startswith("```"):
        txt = _CODE_FENCE_START.sub("", txt, count=1)
        txt = _CODE_FENCE_END.sub("", txt, count=1).strip()
    return txt


def parse_recipe_json(text: str) -> dict[str, Any]:
    """Parse generated text into a JSON object.

    Raises:
        InvalidJSON: If the text is not JSON or not a JSON object.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise InvalidJSON(f"Generated text is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if not isinstance(data, dict):
        raise InvalidJSON(f"Generated JSON is a {type(data).__name__}, expected an object")
    return data


def _require_name(data: dict[str, Any]) -> str:
    value = data.get("recipeName")
    if value is None:
        raise SchemaViolation("recipeName")
    if not isinstance(value, str):
        raise SchemaViolation("recipeName", "expected a string")
    if not value.strip():
        raise SchemaViolation("recipeName", "empty")
    return value.strip()


def _require_string_list(data: dict[str, Any], field: str) -> List[str]:
    value = data.get(field)
    if value is None:
        raise SchemaViolation(field)
    if not isinstance(value, list):
        raise SchemaViolation(field, "expected a list")

    items = []
    for item in value:
        # bool is an int subclass but never a meaningful ingredient or step
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise SchemaViolation(field, "items must be strings")
        text = str(item).strip()
        if text:
            items.append(text)

    if not items:
        raise SchemaViolation(field, "empty")
    return items


def _require_positive_int(data: dict[str, Any], field: str) -> int:
    value = data.get(field)
    if value is None:
        raise SchemaViolation(field)

    if isinstance(value, bool):
        raise SchemaViolation(field, "expected an integer")
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, float) and value.is_integer():
        minutes = int(value)
    elif isinstance(value, str) and value.strip().isdecimal():
        minutes = int(value.strip())
    else:
        raise SchemaViolation(field, "expected an integer")

    if minutes <= 0:
        raise SchemaViolation(field, "must be positive")
    return minutes


def _optional_description(data: dict[str, Any]) -> str:
    value = data.get("description")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SchemaViolation("description", "expected a string")
    return value.strip()


def validate_recipe_data(data: dict[str, Any]) -> Recipe:
    """Check required fields in order and build the Recipe."""
    recipe_name = _require_name(data)
    ingredients = _require_string_list(data, "ingredients")
    instructions = _require_string_list(data, "instructions")
    prep_time_minutes = _require_positive_int(data, "prepTimeMinutes")
    description = _optional_description(data)

    return Recipe(
        recipe_name=recipe_name,
        description=description,
        ingredients=ingredients,
        instructions=instructions,
        prep_time_minutes=prep_time_minutes,
    )


def parse_recipe_response(raw: RawProviderResponse) -> Recipe:
    """Convert a provider envelope into a validated Recipe.

    Raises:
        MalformedResponse: Generated text missing from the envelope.
        InvalidJSON: Generated text is not a JSON object.
        SchemaViolation: First missing or invalid required field.
    """
    text = extract_generated_text(raw)
    data = parse_recipe_json(text)
    recipe = validate_recipe_data(data)
    logger.debug(
        f"Validated recipe '{recipe.recipe_name}' "
        f"({len(recipe.ingredients)} ingredients, {len(recipe.instructions)} steps)"
    )
    return recipe
