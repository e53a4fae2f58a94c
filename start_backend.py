#!/usr/bin/env python3
"""
Startup script for the ContextFlow back-end
"""

import logging
import sys

import requests

from app import app
from common.config import config

logger = logging.getLogger("start_backend")

OPENAI_MODELS_URL = "https://api.openai.com/v1/models"
PORT = 3001


def check_openai(timeout: int = 10) -> bool:
    """Check that the configured API key is accepted by the model API."""
    try:
        response = requests.get(
            OPENAI_MODELS_URL,
            headers={"Authorization": f"Bearer {config.openai_api_key}"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        logger.warning("Could not reach the OpenAI API: %s", e)
        return False

    if response.status_code == 200:
        models = [m.get("id") for m in response.json().get("data", [])]
        if config.openai_model not in models:
            logger.warning("Model %s is not listed for this key", config.openai_model)
        else:
            logger.info("OpenAI API reachable, model %s available", config.openai_model)
        return True

    logger.error("OpenAI API responded with status %s", response.status_code)
    return False


def main():
    logger.info("Starting ContextFlow back-end...")

    if not config.validate_ai_config():
        logger.error("Missing OPENAI_API_KEY environment variable.")
        sys.exit(1)

    if not check_openai():
        logger.warning("Explain and chat will fail until the OpenAI API is reachable")

    logger.info("API server running at http://localhost:%d", PORT)
    try:
        app.run(host="0.0.0.0", port=PORT)
    except KeyboardInterrupt:
        logger.info("Server stopped by user.")


if __name__ == "__main__":
    main()
