"""Request handler: one generation request from payload to Recipe.

Pipeline (each stage either advances or ends the request with a RecipeServiceError):

    Received    -> RateChecked   RateLimited (429) if the client is over its budget
    RateChecked -> Validated     BadRequest (400) on bad shape, empty or oversized input
    Validated   -> Prompted      pure
    Prompted    -> Generated     UpstreamError (500) if the model call fails
    Generated   -> Sanitized     pure
    Sanitized   -> Parsed        InvalidRecipeFormat (500) with the validator diagnostic

Nothing is retried. The caller decides whether to resubmit.
"""

import asyncio
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from recipe_generator.clients.gemini import GenerationClient
from recipe_generator.models.models import Recipe
from recipe_generator.pipeline.errors import (
    InvalidRecipeFormat,
    MalformedJson,
    ProviderError,
    RateLimited,
    RecipeServiceError,
    RequestCancelled,
    UpstreamError,
)
from recipe_generator.pipeline.input_validator import InputValidator
from recipe_generator.pipeline.rate_limiter import RateLimiter
from recipe_generator.pipeline.recipe_validator import parse_recipe
from recipe_generator.pipeline.sanitizer import clean
from recipe_generator.prompts.prompts import build_prompt
from recipe_generator.utils.logger import logger


DisconnectCheck = Callable[[], Awaitable[bool]]


class Stage(str, Enum):
    RECEIVED = "received"
    RATE_CHECKED = "rate_checked"
    VALIDATED = "validated"
    PROMPTED = "prompted"
    GENERATED = "generated"
    SANITIZED = "sanitized"
    PARSED = "parsed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class RecipeRequestHandler:
    """Runs the generation pipeline for a single request."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        generation_client: GenerationClient,
        input_validator: Optional[InputValidator] = None,
        disconnect_poll_seconds: float = 0.5,
    ) -> None:
        """Initialize the handler.

        Args:
            rate_limiter: Shared limiter, owned by the hosting process.
            generation_client: Model client (Gemini in production, stubs in tests).
            input_validator: Payload validator (default limit: 30000 chars).
            disconnect_poll_seconds: How often to ask whether the client went away
                while waiting on the model.
        """
        self.rate_limiter = rate_limiter
        self.generation_client = generation_client
        self.input_validator = input_validator or InputValidator()
        self.disconnect_poll_seconds = disconnect_poll_seconds

    async def handle(
        self,
        payload: Any,
        client_key: str,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> Recipe:
        """Run the pipeline for one decoded request body.

        Args:
            payload: Decoded JSON body (None if the body was not valid JSON).
            client_key: Rate-limit bucket for the caller.
            is_disconnected: Optional coroutine function reporting client disconnects.

        Returns:
            Recipe: Validated recipe.

        Raises:
            RateLimited, BadRequest, UpstreamError, InvalidRecipeFormat, RequestCancelled.
        """
        request_id = uuid.uuid4().hex[:8]
        log_extra = {"request_id": request_id, "client_key": client_key}
        stage = Stage.RECEIVED

        try:
            if not self.rate_limiter.check(client_key):
                logger.warning(f"Rate limit exceeded for client {client_key}", extra=log_extra)
                raise RateLimited()
            stage = Stage.RATE_CHECKED

            request = self.input_validator.validate_payload(payload)
            stage = Stage.VALIDATED
            logger.info(
                f"Generating recipe (tone={request.tone.value}, "
                f"ingredients={len(request.ingredients)} chars, steps={len(request.steps)} chars)",
                extra=log_extra,
            )

            prompt = build_prompt(request.ingredients, request.steps, request.tone)
            stage = Stage.PROMPTED
            logger.debug(f"Prompt:\n{prompt}", extra=log_extra)

            try:
                raw = await self._generate(prompt, is_disconnected)
            except ProviderError as e:
                logger.error(f"Generation failed: {e}", extra=log_extra)
                raise UpstreamError(str(e)) from e
            stage = Stage.GENERATED
            logger.debug(f"Raw completion:\n{raw}", extra=log_extra)

            candidate = clean(raw)
            stage = Stage.SANITIZED

            try:
                recipe = parse_recipe(candidate)
            except MalformedJson as e:
                logger.error(f"JSON parsing error: {e.parser_message}", extra=log_extra)
                logger.error(f"Attempted to parse: {e.text}", extra=log_extra)
                raise
            except InvalidRecipeFormat as e:
                logger.error(f"Recipe validation failed: {e.detail}", extra=log_extra)
                raise
            stage = Stage.PARSED

        except RequestCancelled:
            logger.info(
                f"Request {Stage.CANCELLED.value} during stage '{stage.value}' (client disconnected)", extra=log_extra
            )
            raise
        except asyncio.CancelledError:
            logger.info(f"Request {Stage.CANCELLED.value} during stage '{stage.value}'", extra=log_extra)
            raise
        except RecipeServiceError as e:
            logger.info(
                f"Request {Stage.FAILED.value} at stage '{stage.value}': {e.status_code} {e.message}", extra=log_extra
            )
            raise

        logger.info(f"Recipe generated: {recipe.name!r} ({Stage.SUCCEEDED.value})", extra=log_extra)
        return recipe

    async def _generate(self, prompt: str, is_disconnected: Optional[DisconnectCheck]) -> str:
        """Await the model, abandoning the call if the client disconnects.

        Raises:
            ProviderError: Any failure of the generation client (non-ProviderError
                exceptions are wrapped).
            RequestCancelled: The client went away before the completion arrived.
        """
        task = asyncio.ensure_future(self._call_client(prompt))

        if is_disconnected is None:
            return await task

        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=self.disconnect_poll_seconds)
                if done:
                    return task.result()
                if await is_disconnected():
                    task.cancel()
                    raise RequestCancelled()
        except asyncio.CancelledError:
            task.cancel()
            raise

    async def _call_client(self, prompt: str) -> str:
        try:
            return await self.generation_client.generate(prompt)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Failed to generate recipe: {e}") from e
