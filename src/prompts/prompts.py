"""Prompt, schema and request construction for recipe generation.

build_recipe_request() is a pure transform from Constraints to an immutable
GenerationRequest: the user prompt, the response schema the model must
conform to, the generation config and the fixed chef persona.
"""

from src.models.models import Constraints, DietaryType, GenerationConfig, GenerationRequest

DEFAULT_TEMPERATURE = 0.7

# Substituted for empty optional fields so the prompt never has a blank slot
DEFAULT_INGREDIENTS = "I have no specific ingredients, be creative."
DEFAULT_ALLERGIES = "None, ensure safety."
DEFAULT_SPECIAL_REQUEST = "Make it simple and delicious."

DIET_PHRASES = {
    DietaryType.VEGETARIAN: "Strictly Vegetarian",
    DietaryType.NON_VEGETARIAN: "Non-Vegetarian",
}

REQUIRED_RECIPE_FIELDS = ("recipeName", "ingredients", "instructions", "prepTimeMinutes")

# Gemini responseSchema (OpenAPI subset, upper-case type names)
RECIPE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "recipeName": {
            "type": "STRING",
            "description": "A creative and appetizing name for the dish.",
        },
        "description": {
            "type": "STRING",
            "description": "A brief, appealing description of the final dish.",
        },
        "ingredients": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of all ingredients with specific quantities.",
        },
        "instructions": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Step-by-step instructions for preparing the dish.",
        },
        "prepTimeMinutes": {
            "type": "INTEGER",
            "description": "The estimated total time (prep + cook) in minutes.",
        },
    },
    "required": list(REQUIRED_RECIPE_FIELDS),
}

SYSTEM_INSTRUCTION = (
    "You are an expert, world-class chef AI. Your sole purpose is to create novel, detailed, "
    "and delicious recipes that strictly adhere to all user criteria and restrictions. "
    "Output only the requested JSON object."
)


def get_recipe_prompt(constraints: Constraints) -> str:
    """Render the user prompt for one set of constraints.

    Args:
        constraints: Validated user constraints.

    Returns:
        Prompt text with default phrasing for any empty optional field.
    """
    return f"""Generate a single, unique food recipe based on the following strict criteria:
- Main Ingredients: {constraints.ingredients or DEFAULT_INGREDIENTS}
- Dietary Type: {DIET_PHRASES[constraints.dietary_type]}
- Cooking Fat: Use {constraints.fat.value} exclusively.
- Allergies to Avoid: {constraints.allergies or DEFAULT_ALLERGIES}
- Special Request/Style: {constraints.special_request or DEFAULT_SPECIAL_REQUEST}
The entire response MUST be a single JSON object conforming to the provided schema. DO NOT include any text outside the JSON structure."""


def build_recipe_request(constraints: Constraints, temperature: float = DEFAULT_TEMPERATURE) -> GenerationRequest:
    """Build the schema-constrained generation request.

    Deterministic and side-effect free: identical constraints and temperature
    always produce an equal request.
    """
    return GenerationRequest(
        prompt_text=get_recipe_prompt(constraints),
        schema_descriptor=RECIPE_SCHEMA,
        generation_config=GenerationConfig(temperature=temperature),
        system_instruction=SYSTEM_INSTRUCTION,
    )
