"""HTTP API for the recipe generator.

Routes:
- POST /generate     ingredients + steps + tone -> Recipe JSON
- POST /export/wprm  Recipe JSON -> WP Recipe Maker import JSON
- GET  /health       liveness + configured model

Every failure is returned as {"error": "<message>"} with the status code of
the RecipeServiceError that caused it.
"""

import contextlib
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_generator.clients.gemini import GeminiGenerationClient, GenerationClient
from recipe_generator.export.wprm import to_wprm
from recipe_generator.pipeline.errors import BadRequest, InvalidRecipeFormat, RecipeServiceError
from recipe_generator.pipeline.handler import RecipeRequestHandler
from recipe_generator.pipeline.input_validator import InputValidator
from recipe_generator.pipeline.rate_limiter import RateLimiter
from recipe_generator.pipeline.recipe_validator import parse_recipe
from recipe_generator.utils.config import Config, config as default_config
from recipe_generator.utils.logger import logger


def get_client_key(request: Request, fallback: str = "unknown") -> str:
    """Rate-limit key for a request.

    First entry of X-Forwarded-For when present, then the socket peer address.
    Only clients with neither share the `fallback` bucket.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client and request.client.host:
        return request.client.host
    logger.debug(f"No client address available, using fallback rate-limit key '{fallback}'")
    return fallback


def create_app(
    settings: Optional[Config] = None,
    generation_client: Optional[GenerationClient] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration (default: module-level config).
        generation_client: Model client; a GeminiGenerationClient is built from
            settings when omitted (GEMINI_API_KEY required).
        rate_limiter: Limiter instance; built from settings when omitted.

    Returns:
        FastAPI: Configured application. The rate limiter's sweeper runs for the
        lifetime of the app (started/stopped by the lifespan).

    Raises:
        ValueError: If the configuration is invalid.
    """
    settings = settings or default_config
    settings.validate(require_api_key=generation_client is None)

    if generation_client is None:
        logger.info(f"Using Gemini model: {settings.GEMINI_MODEL}")
        generation_client = GeminiGenerationClient.from_config(settings)

    if rate_limiter is None:
        rate_limiter = RateLimiter(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )

    handler = RecipeRequestHandler(
        rate_limiter=rate_limiter,
        generation_client=generation_client,
        input_validator=InputValidator(max_input_chars=settings.MAX_INPUT_CHARS),
        disconnect_poll_seconds=settings.DISCONNECT_POLL_SECONDS,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.rate_limiter.start()
        logger.info(
            f"Rate limiting: {settings.RATE_LIMIT_MAX_REQUESTS} requests per "
            f"{settings.RATE_LIMIT_WINDOW_SECONDS}s per client"
        )
        yield
        await app.state.rate_limiter.stop()

    app = FastAPI(title="WP Recipe Generator", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.handler = handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecipeServiceError)
    async def recipe_service_error_handler(request: Request, exc: RecipeServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "model": settings.GEMINI_MODEL}

    @app.post("/generate")
    async def generate(request: Request) -> JSONResponse:
        client_key = get_client_key(request, settings.RATE_LIMIT_FALLBACK_KEY)

        try:
            payload = await request.json()
        except ValueError:
            payload = None

        try:
            recipe = await request.app.state.handler.handle(
                payload,
                client_key,
                is_disconnected=request.is_disconnected,
            )
        except RecipeServiceError:
            raise
        except Exception as e:
            logger.error(f"Generation error: {e}", exc_info=True)
            raise RecipeServiceError("Failed to generate recipe") from e

        return JSONResponse(content=recipe.to_dict())

    @app.post("/export/wprm")
    async def export_wprm(request: Request) -> JSONResponse:
        body = (await request.body()).decode("utf-8", errors="replace")
        try:
            recipe = parse_recipe(body)
        except InvalidRecipeFormat as e:
            raise BadRequest(e.message) from e
        return JSONResponse(content=to_wprm(recipe))

    return app
