"""ASGI entrypoint: ``uvicorn expense_tracker.main:app``."""

import uvicorn

from .core.app_factory import create_application
from .core.config import Settings

app = create_application()

__all__ = ("app",)


def run() -> None:
    settings = Settings()
    uvicorn.run("expense_tracker.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
