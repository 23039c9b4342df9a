"""
Main entrypoint: FastAPI server for the recognition results engine.

Env: RECOGNITION_DB_URL / DATABASE_URL (or RECOGNITION_DB_PATH), API_HOST, API_PORT,
RESULTS_MAX_WORKERS, RESULTS_LOCK_TTL_SEC, LOG_LEVEL, LOG_FORMAT.

Equivalent: uvicorn recognition_engine.api_server.app:app --host 0.0.0.0 --port 8000
"""

# Configure structured JSON logging before other imports that may log
from recognition_engine.recognition_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    import uvicorn

    from recognition_engine.api_server.app import app
    from recognition_engine.config import get_settings

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
