"""
run_gateway.py: start the LLM Gateway with uvicorn.

Reads APP_HOST / APP_PORT / APP_DEBUG from the environment (or .env) and
serves llm_gateway.main:app. Provider keys come from {PROVIDER}_API_KEY.

Usage:
    OPENAI_API_KEY=sk-... python run_gateway.py
"""

import uvicorn

from llm_gateway.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "llm_gateway.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug and settings.app_env == "development",
        log_config=None,  # keep llm_gateway.core.logging handlers
    )
