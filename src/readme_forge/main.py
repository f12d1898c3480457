from __future__ import annotations
import logging
import uvicorn
from readme_forge.infrastructure.config import get_settings

# One INFO line per GitHub request drowns out the pipeline's own progress.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def main() -> None:
    """Configure logging and serve the API with uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )
    if settings.log_level.upper() != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    uvicorn.run(
        "readme_forge.interface.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
