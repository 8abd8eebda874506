"""Unit tests for GenerationController orchestration and state transitions."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.controller.controller import GenerationController, user_message
from src.models.models import Constraints, DietaryType, Failure, FatType, Idle, Loading, Success
from src.prompts.prompts import build_recipe_request
from src.utils.errors import HttpClientError, NetworkError, RetryExhausted

VALID_RECIPE = {
    "recipeName": "Chicken Fried Rice",
    "description": "Weeknight classic.",
    "ingredients": ["2 cups cooked rice", "200 g chicken", "2 tbsp oil"],
    "instructions": ["Heat the oil", "Brown the chicken", "Add rice and toss"],
    "prepTimeMinutes": 25,
}


def envelope(data):
    text = data if isinstance(data, str) else json.dumps(data)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def transport():
    mock = MagicMock()
    mock.send = AsyncMock(return_value=envelope(VALID_RECIPE))
    return mock


@pytest.fixture
def constraints():
    return Constraints(ingredients="chicken, rice", dietary_type=DietaryType.NON_VEGETARIAN, fat=FatType.OIL)


class TestUserMessage:
    def test_format(self):
        assert user_message("Network error") == (
            "Failed to generate recipe: Network error. Please refine your input and try again."
        )

    def test_no_double_period(self):
        assert ".." not in user_message("Received an empty or malformed response from the AI.")


class TestGenerationController:
    """Test submit() transitions."""

    def test_initial_state_is_idle(self, transport):
        controller = GenerationController(transport)

        assert isinstance(controller.state, Idle)
        assert not controller.is_loading

    @pytest.mark.asyncio
    async def test_end_to_end_success(self, transport, constraints):
        controller = GenerationController(transport)

        state = await controller.submit(constraints)

        assert isinstance(state, Success)
        assert state is controller.state
        assert state.recipe.recipe_name == "Chicken Fried Rice"
        assert state.recipe.prep_time_minutes == 25

        request = transport.send.await_args.args[0]
        assert "Non-Vegetarian" in request.prompt_text
        assert "oil exclusively" in request.prompt_text
        assert "chicken, rice" in request.prompt_text

    @pytest.mark.asyncio
    async def test_passes_budget_and_temperature(self, transport, constraints):
        builder = MagicMock(side_effect=build_recipe_request)
        controller = GenerationController(transport, builder=builder, max_attempts=3, temperature=0.2)

        await controller.submit(constraints)

        builder.assert_called_once_with(constraints, temperature=0.2)
        assert transport.send.await_args.args[1] == 3

    @pytest.mark.asyncio
    async def test_listeners_see_loading_then_success(self, transport, constraints):
        controller = GenerationController(transport)
        seen = []
        controller.subscribe(seen.append)

        await controller.submit(constraints)

        assert [s.status for s in seen] == ["loading", "success"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, transport, constraints):
        controller = GenerationController(transport)
        seen = []
        unsubscribe = controller.subscribe(seen.append)
        unsubscribe()
        unsubscribe()

        await controller.submit(constraints)

        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_pipeline(self, transport, constraints):
        controller = GenerationController(transport)
        controller.subscribe(MagicMock(side_effect=RuntimeError("ui crashed")))

        state = await controller.submit(constraints)

        assert isinstance(state, Success)

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_failure_state(self, transport, constraints):
        transport.send.side_effect = RetryExhausted(5, NetworkError("offline"))
        controller = GenerationController(transport)

        state = await controller.submit(constraints)

        assert isinstance(state, Failure)
        assert state.error.kind == "RetryExhausted"
        assert state.error.message == (
            "Failed to generate recipe: API call failed after 5 attempts: offline. "
            "Please refine your input and try again."
        )

    @pytest.mark.asyncio
    async def test_bad_request_failure(self, transport, constraints):
        transport.send.side_effect = HttpClientError("Invalid argument")
        controller = GenerationController(transport)

        state = await controller.submit(constraints)

        assert state.error.kind == "HttpClientError"
        assert "Bad Request: Invalid argument" in state.error.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,kind",
        [
            ({"candidates": []}, "MalformedResponse"),
            (envelope("Sure! Here is a recipe."), "InvalidJSON"),
            (envelope({"description": "x"}), "SchemaViolation"),
        ],
    )
    async def test_validation_failures(self, transport, constraints, raw, kind):
        transport.send.return_value = raw
        controller = GenerationController(transport)

        state = await controller.submit(constraints)

        assert isinstance(state, Failure)
        assert state.error.kind == kind
        assert state.error.message.startswith("Failed to generate recipe: ")

    @pytest.mark.asyncio
    async def test_unexpected_error(self, transport, constraints):
        transport.send.side_effect = KeyError("boom")
        controller = GenerationController(transport)

        state = await controller.submit(constraints)

        assert state.error.kind == "UnexpectedError"

    @pytest.mark.asyncio
    async def test_can_resubmit_after_failure(self, transport, constraints):
        transport.send.side_effect = [NetworkError("offline"), envelope(VALID_RECIPE)]
        controller = GenerationController(transport)

        first = await controller.submit(constraints)
        second = await controller.submit(constraints)

        assert isinstance(first, Failure)
        assert isinstance(second, Success)

    @pytest.mark.asyncio
    async def test_concurrent_submit_is_rejected(self, transport, constraints):
        gate = asyncio.Event()

        async def slow_send(request, max_attempts=None):
            await gate.wait()
            return envelope(VALID_RECIPE)

        transport.send = AsyncMock(side_effect=slow_send)
        controller = GenerationController(transport)

        first = asyncio.create_task(controller.submit(constraints))
        await asyncio.sleep(0)
        assert controller.is_loading

        rejected = await controller.submit(constraints)
        assert isinstance(rejected, Loading)

        gate.set()
        final = await first

        assert isinstance(final, Success)
        assert transport.send.await_count == 1

    @pytest.mark.asyncio
    async def test_cancellation_moves_to_failure(self, transport, constraints):
        started = asyncio.Event()

        async def hanging_send(request, max_attempts=None):
            started.set()
            await asyncio.Event().wait()

        transport.send = AsyncMock(side_effect=hanging_send)
        controller = GenerationController(transport)

        task = asyncio.create_task(controller.submit(constraints))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert isinstance(controller.state, Failure)
        assert controller.state.error.kind == "Cancelled"
        assert not controller.is_loading
