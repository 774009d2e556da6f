"""WP Recipe Generator - HTTP service entry point.

Single entry point for the recipe generation service:
- Validates configuration (GEMINI_API_KEY required)
- Builds the FastAPI app with a Gemini generation client and rate limiter
- Serves POST /generate, POST /export/wprm and GET /health via uvicorn

Run with: python app.py
"""

import uvicorn

from recipe_generator.api.app import create_app
from recipe_generator.utils.config import config
from recipe_generator.utils.logger import logger


logger.info("Initializing WP Recipe Generator...")
try:
    app = create_app(config)
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise SystemExit(1) from e
logger.info("Application configured successfully")


if __name__ == "__main__":
    logger.info(f"Starting WP Recipe Generator on port {config.PORT}")
    logger.info(f"Model: {config.GEMINI_MODEL}")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host=config.HOST, port=config.PORT)
