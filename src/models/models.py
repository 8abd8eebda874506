"""Data models and schemas for Recipe Chef.

Defines Pydantic models for the generation pipeline:
- Constraints: user-chosen recipe parameters (UI input)
- GenerationRequest: immutable, schema-constrained provider request
- Recipe: validated domain object produced from the provider output
- RequestState: tagged variant (Idle | Loading | Success | Failure) owned by
  the GenerationController
All models use Pydantic v2.
"""

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, List, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Opaque decoded JSON envelope returned by the provider
RawProviderResponse = dict[str, Any]


class DietaryType(str, Enum):
    """Dietary preference offered by the form."""

    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"


class FatType(str, Enum):
    """Cooking fat the recipe must use exclusively."""

    OIL = "oil"
    BUTTER = "butter"


# Short values posted by the original form radio buttons
_DIET_ALIASES = {
    "veg": DietaryType.VEGETARIAN,
    "non-veg": DietaryType.NON_VEGETARIAN,
    "nonveg": DietaryType.NON_VEGETARIAN,
    "non_vegetarian": DietaryType.NON_VEGETARIAN,
}


class Constraints(BaseModel):
    """User-supplied meal constraints.

    Free-text fields may be empty; the request builder substitutes default
    phrasing for them. Whitespace-only values count as empty.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    ingredients: Annotated[
        str, Field("", max_length=500, description="Main ingredients on hand (free text, optional)")
    ]
    dietary_type: Annotated[
        DietaryType, Field(DietaryType.VEGETARIAN, description="vegetarian or non-vegetarian")
    ]
    fat: Annotated[FatType, Field(FatType.OIL, description="oil or butter")]
    allergies: Annotated[
        str, Field("", max_length=500, description="Allergies to avoid (free text, optional)")
    ]
    special_request: Annotated[
        str, Field("", max_length=500, description="Style or time request (free text, optional)")
    ]

    @field_validator("dietary_type", mode="before")
    @classmethod
    def parse_dietary_type(cls, value: Any) -> Any:
        """Accept the short 'veg' / 'non-veg' spellings and any casing."""
        if isinstance(value, str):
            normalized = value.strip().lower()
            return _DIET_ALIASES.get(normalized, normalized)
        return value

    @field_validator("fat", mode="before")
    @classmethod
    def parse_fat(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("ingredients", "allergies", "special_request", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class GenerationConfig(BaseModel):
    """Sampling and output settings sent with every request."""

    model_config = ConfigDict(frozen=True)

    temperature: Annotated[float, Field(ge=0.0, le=2.0)]
    response_mime_type: Literal["application/json"] = "application/json"


def freeze_json(value: Any) -> Any:
    """Deep read-only view of decoded JSON: dicts become mapping proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_json(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_json(item) for item in value)
    return value


def thaw_json(value: Any) -> Any:
    """Inverse of freeze_json: fresh mutable dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_json(item) for item in value]
    return value


class GenerationRequest(BaseModel):
    """Immutable request built from Constraints.

    The schema descriptor is stored as a deep read-only mapping (nested
    arrays as tuples); ``to_payload`` renders the provider wire body from a
    fresh mutable copy.
    """

    model_config = ConfigDict(frozen=True)

    prompt_text: str
    schema_descriptor: Mapping[str, Any]
    generation_config: GenerationConfig
    system_instruction: str

    @field_validator("schema_descriptor", mode="after")
    @classmethod
    def freeze_descriptor(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return freeze_json(value)

    def to_payload(self) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": self.prompt_text}]}],
            "generationConfig": {
                "responseMimeType": self.generation_config.response_mime_type,
                "responseSchema": thaw_json(self.schema_descriptor),
                "temperature": self.generation_config.temperature,
            },
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
        }


class Recipe(BaseModel):
    """Domain model for a generated recipe.

    Field aliases match the JSON keys the model is instructed to produce.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    recipe_name: Annotated[str, Field(alias="recipeName", min_length=1, description="Dish name")]
    description: Annotated[str, Field("", description="Short appealing description (may be empty)")]
    ingredients: Annotated[
        List[str], Field(min_length=1, description="Ingredients with quantities, in order")
    ]
    instructions: Annotated[
        List[str], Field(min_length=1, description="Step-by-step instructions, in order")
    ]
    prep_time_minutes: Annotated[
        int, Field(alias="prepTimeMinutes", gt=0, description="Total prep + cook time in minutes")
    ]


class ErrorDetail(BaseModel):
    """User-facing description of a failed generation."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str


class Idle(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["idle"] = "idle"


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["loading"] = "loading"


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    recipe: Recipe


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    error: ErrorDetail


RequestState = Annotated[Union[Idle, Loading, Success, Failure], Field(discriminator="status")]
