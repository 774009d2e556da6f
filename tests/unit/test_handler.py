"""Unit tests for the request handler pipeline."""

import asyncio
import logging

import pytest

from recipe_generator.pipeline.errors import (
    BadRequest,
    EmptyRequiredList,
    MalformedJson,
    MissingFields,
    RateLimited,
    RequestCancelled,
    UpstreamError,
)
from recipe_generator.pipeline.handler import RecipeRequestHandler
from recipe_generator.pipeline.input_validator import InputValidator
from recipe_generator.pipeline.rate_limiter import RateLimiter


PAYLOAD = {"ingredients": "2 eggs\n1 cup flour", "steps": "Mix\nBake", "tone": "neutral"}


class HangingClient:
    """Never completes; records whether its call was cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def generate(self, prompt: str) -> str:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return ""


def make_handler(client, **kwargs) -> RecipeRequestHandler:
    return RecipeRequestHandler(
        rate_limiter=kwargs.pop("rate_limiter", RateLimiter()),
        generation_client=client,
        **kwargs,
    )


class TestHandleSuccess:
    """Test the happy path."""

    @pytest.mark.asyncio
    async def test_returns_recipe_from_fenced_completion(self, stub_client, pancakes):
        recipe = await make_handler(stub_client).handle(dict(PAYLOAD), client_key="1.2.3.4")

        assert recipe.to_dict() == pancakes

    @pytest.mark.asyncio
    async def test_prompt_contains_request_text(self, stub_client):
        await make_handler(stub_client).handle({**PAYLOAD, "tone": "playful"}, client_key="k")

        prompt = stub_client.prompts[0]
        assert "Use playful tone for instructions." in prompt
        assert "2 eggs\n1 cup flour" in prompt

    @pytest.mark.asyncio
    async def test_completes_without_disconnect_polling_when_fast(self, stub_client):
        checks = []

        async def is_disconnected():
            checks.append(True)
            return False

        handler = make_handler(stub_client, disconnect_poll_seconds=5)
        recipe = await handler.handle(dict(PAYLOAD), client_key="k", is_disconnected=is_disconnected)

        assert recipe.name == "Simple Pancakes"
        assert checks == []

    @pytest.mark.asyncio
    async def test_logs_carry_request_context(self, stub_client, caplog):
        with caplog.at_level(logging.INFO, logger="recipe_generator"):
            await make_handler(stub_client).handle(dict(PAYLOAD), client_key="203.0.113.7")

        records = [r for r in caplog.records if getattr(r, "client_key", None) == "203.0.113.7"]
        assert records
        assert len({r.request_id for r in records}) == 1


class TestHandleFailures:
    """Test each failure stage maps to its error."""

    @pytest.mark.asyncio
    async def test_rate_limited_before_validation(self, stub_client):
        handler = make_handler(stub_client, rate_limiter=RateLimiter(max_requests=1))
        await handler.handle(dict(PAYLOAD), client_key="k")

        with pytest.raises(RateLimited) as exc_info:
            await handler.handle(None, client_key="k")

        assert exc_info.value.status_code == 429
        assert len(stub_client.prompts) == 1

    @pytest.mark.asyncio
    async def test_invalid_payload_is_bad_request(self, stub_client):
        with pytest.raises(BadRequest):
            await make_handler(stub_client).handle({"ingredients": "", "steps": "x", "tone": "neutral"}, client_key="k")

        assert stub_client.prompts == []

    @pytest.mark.asyncio
    async def test_rejected_input_still_counts_against_limit(self, stub_client):
        limiter = RateLimiter(max_requests=1)
        handler = make_handler(stub_client, rate_limiter=limiter)

        with pytest.raises(BadRequest):
            await handler.handle(None, client_key="k")

        assert limiter.remaining("k") == 0

    @pytest.mark.asyncio
    async def test_input_limit_from_validator(self, stub_client):
        handler = make_handler(stub_client, input_validator=InputValidator(max_input_chars=10))

        with pytest.raises(BadRequest, match="Input too long"):
            await handler.handle(dict(PAYLOAD), client_key="k")

    @pytest.mark.asyncio
    async def test_provider_error_becomes_upstream_error(self, failing_client):
        with pytest.raises(UpstreamError) as exc_info:
            await make_handler(failing_client).handle(dict(PAYLOAD), client_key="k")

        assert exc_info.value.status_code == 500
        assert "503 UNAVAILABLE" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unexpected_client_exception_is_wrapped(self, make_stub_client):
        client = make_stub_client(error=RuntimeError("socket closed"))

        with pytest.raises(UpstreamError, match="Failed to generate recipe: socket closed"):
            await make_handler(client).handle(dict(PAYLOAD), client_key="k")

    @pytest.mark.asyncio
    async def test_prose_completion_is_malformed(self, make_stub_client):
        client = make_stub_client(completion="I cannot help with that.")

        with pytest.raises(MalformedJson) as exc_info:
            await make_handler(client).handle(dict(PAYLOAD), client_key="k")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_missing_fields_reported(self, make_stub_client):
        client = make_stub_client(completion='{"name":"X","servings":"2"}')

        with pytest.raises(MissingFields) as exc_info:
            await make_handler(client).handle(dict(PAYLOAD), client_key="k")

        assert exc_info.value.fields == ["prepTime", "cookTime", "ingredients", "instructions"]

    @pytest.mark.asyncio
    async def test_empty_list_reported(self, make_stub_client):
        client = make_stub_client(completion='{"name":"X","servings":"2","prepTime":"1","cookTime":"1","ingredients":[],"instructions":["a"]}')

        with pytest.raises(EmptyRequiredList, match="ingredients"):
            await make_handler(client).handle(dict(PAYLOAD), client_key="k")


class TestHandleCancellation:
    """Test client disconnects while waiting on the model."""

    @pytest.mark.asyncio
    async def test_disconnect_cancels_generation(self):
        client = HangingClient()

        async def is_disconnected():
            return client.started.is_set()

        handler = make_handler(client, disconnect_poll_seconds=0.01)

        with pytest.raises(RequestCancelled) as exc_info:
            await handler.handle(dict(PAYLOAD), client_key="k", is_disconnected=is_disconnected)

        assert exc_info.value.status_code == 499
        await asyncio.sleep(0)
        assert client.cancelled is True

    @pytest.mark.asyncio
    async def test_outer_cancellation_cancels_generation(self):
        client = HangingClient()
        handler = make_handler(client)

        task = asyncio.ensure_future(handler.handle(dict(PAYLOAD), client_key="k"))
        await client.started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert client.cancelled is True


class TestHandleOutcomeLogging:
    """Test the final outcome and stage appear in the request log."""

    @pytest.mark.asyncio
    async def test_failure_logs_failed_outcome_and_stage(self, failing_client, caplog):
        with caplog.at_level(logging.INFO, logger="recipe_generator"):
            with pytest.raises(UpstreamError):
                await make_handler(failing_client).handle(dict(PAYLOAD), client_key="k")

        assert "Request failed at stage 'prompted': 500" in caplog.text

    @pytest.mark.asyncio
    async def test_rate_limit_logs_failed_at_received(self, stub_client, caplog):
        handler = make_handler(stub_client, rate_limiter=RateLimiter(max_requests=1))
        await handler.handle(dict(PAYLOAD), client_key="k")

        with caplog.at_level(logging.INFO, logger="recipe_generator"):
            with pytest.raises(RateLimited):
                await handler.handle(dict(PAYLOAD), client_key="k")

        assert "Request failed at stage 'received': 429" in caplog.text

    @pytest.mark.asyncio
    async def test_disconnect_logs_cancelled_outcome(self, caplog):
        client = HangingClient()

        async def is_disconnected():
            return client.started.is_set()

        handler = make_handler(client, disconnect_poll_seconds=0.01)

        with caplog.at_level(logging.INFO, logger="recipe_generator"):
            with pytest.raises(RequestCancelled):
                await handler.handle(dict(PAYLOAD), client_key="k", is_disconnected=is_disconnected)

        assert "Request cancelled during stage 'prompted' (client disconnected)" in caplog.text
