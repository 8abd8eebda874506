"""End-to-end tests against the live Gemini generateContent endpoint.

Runs the full pipeline (request builder, resilient transport, validator,
controller) with real network calls. Skipped when GEMINI_API_KEY is unset.
"""

import pytest

from src.controller.controller import GenerationController
from src.models.models import Constraints, DietaryType, FatType, Failure, Success
from src.prompts.prompts import build_recipe_request
from src.transport.transport import ResilientTransport
from src.utils.config import Config
from src.utils.errors import HttpClientError
from src.utils.logger import logger
from src.validation.validator import parse_recipe_response

pytestmark = pytest.mark.integration


@pytest.fixture
def live_config() -> Config:
    """Config read after conftest has loaded .env."""
    config = Config()
    config.validate()
    return config


@pytest.fixture
def transport(live_config) -> ResilientTransport:
    return ResilientTransport.from_config(live_config)


class TestLiveGeneration:
    """Single live generations through the whole pipeline."""

    @pytest.mark.asyncio
    async def test_non_vegetarian_recipe(self, transport, live_config):
        controller = GenerationController(transport, temperature=live_config.TEMPERATURE)
        states = []
        controller.subscribe(states.append)

        state = await controller.submit(
            Constraints(ingredients="chicken, rice", dietary_type=DietaryType.NON_VEGETARIAN, fat=FatType.OIL)
        )

        if isinstance(state, Failure):
            pytest.fail(f"Live generation failed: {state.error.kind}: {state.error.message}")

        assert isinstance(state, Success)
        recipe = state.recipe
        logger.info(f"Live recipe: {recipe.recipe_name} ({recipe.prep_time_minutes} min)")
        assert recipe.recipe_name
        assert recipe.ingredients
        assert recipe.instructions
        assert recipe.prep_time_minutes > 0
        assert [s.status for s in states] == ["loading", "success"]

    @pytest.mark.asyncio
    async def test_empty_constraints_still_produce_recipe(self, transport):
        raw = await transport.send(build_recipe_request(Constraints(fat=FatType.BUTTER)))

        recipe = parse_recipe_response(raw)

        assert recipe.recipe_name
        assert recipe.prep_time_minutes > 0

    @pytest.mark.asyncio
    async def test_unknown_model_is_not_a_recipe(self, live_config):
        """A nonexistent model id yields a classified transport failure, never a Recipe."""
        transport = ResilientTransport(
            api_key=live_config.GEMINI_API_KEY,
            model="no-such-model-for-tests",
            base_url=live_config.GEMINI_API_BASE_URL,
        )
        controller = GenerationController(transport, max_attempts=1)

        state = await controller.submit(Constraints())

        assert isinstance(state, Failure)
        assert state.error.kind in {HttpClientError.__name__, "RetryExhausted"}
