"""Generation controller: orchestrates the pipeline and owns RequestState.

State machine (no terminal state):

    Idle ----submit----> Loading
    Success --submit---> Loading
    Failure --submit---> Loading
    Loading --recipe---> Success(recipe)
    Loading --failure--> Failure(error)

At most one generation is in flight per controller. A submit() while Loading
is rejected: it logs a warning, starts nothing and returns the current
Loading state. The Loading transition happens before the first await, so the
guard holds for concurrent submits on one event loop.
"""

import asyncio
from typing import Callable, List, Optional

from src.models.models import (
    Constraints,
    ErrorDetail,
    Failure,
    GenerationRequest,
    Idle,
    Loading,
    RawProviderResponse,
    Recipe,
    RequestState,
    Success,
)
from src.prompts.prompts import DEFAULT_TEMPERATURE, build_recipe_request
from src.transport.transport import ResilientTransport
from src.utils.errors import RecipeGenerationError
from src.utils.logger import logger
from src.validation.validator import parse_recipe_response

StateListener = Callable[[RequestState], None]


def user_message(detail: str) -> str:
    """Wrap a failure detail into the banner text shown to the user."""
    return f"Failed to generate recipe: {detail.rstrip('.')}. Please refine your input and try again."


class GenerationController:
    """Run Builder -> Transport -> Validator and publish RequestState transitions."""

    def __init__(
        self,
        transport: ResilientTransport,
        builder: Callable[..., GenerationRequest] = build_recipe_request,
        validator: Callable[[RawProviderResponse], Recipe] = parse_recipe_response,
        max_attempts: Optional[int] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> None:
        """Initialize GenerationController.

        Args:
            transport: Transport used to reach the provider (anything with an
                async send(request, max_attempts) method).
            builder: Constraints -> GenerationRequest transform.
            validator: Envelope -> Recipe transform.
            max_attempts: Retry budget per submission. Default: the transport policy's.
            temperature: Sampling temperature passed to the builder.
        """
        self._transport = transport
        self._builder = builder
        self._validator = validator
        self._max_attempts = max_attempts
        self._temperature = temperature
        self._state: RequestState = Idle()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, new_state: RequestState) -> None:
        logger.debug(
            f"Request state: {self._state.status} -> {new_state.status}",
            extra={"state": new_state.status},
        )
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener raised; continuing")

    async def submit(self, constraints: Constraints) -> RequestState:
        """Generate one recipe for the given constraints.

        Args:
            constraints: Validated user constraints.

        Returns:
            The resulting state: Success or Failure, or the unchanged Loading
            state when a generation is already in flight.

        Raises:
            asyncio.CancelledError: If the running task is cancelled (the state
                is moved to Failure first).
        """
        if self.is_loading:
            logger.warning("Generation already in progress; submission rejected")
            return self._state

        self._transition(Loading())

        try:
            request = self._builder(constraints, temperature=self._temperature)
            raw = await self._transport.send(request, self._max_attempts)
            recipe = self._validator(raw)
        except RecipeGenerationError as e:
            logger.error(f"Recipe generation failed ({e.kind}): {e}", extra={"error_kind": e.kind})
            self._transition(Failure(error=ErrorDetail(kind=e.kind, message=user_message(str(e)))))
        except asyncio.CancelledError:
            logger.warning("Recipe generation cancelled")
            self._transition(
                Failure(error=ErrorDetail(kind="Cancelled", message="Recipe generation was cancelled."))
            )
            raise
        except Exception as e:
            logger.exception("Unexpected error during recipe generation")
            detail = user_message(str(e) or type(e).__name__)
            self._transition(Failure(error=ErrorDetail(kind="UnexpectedError", message=detail)))
        else:
            logger.info(f"Recipe generated: {recipe.recipe_name} ({recipe.prep_time_minutes} min)")
            self._transition(Success(recipe=recipe))

        return self._state
