"""
cms_authz.api.__main__

Entrypoint for running the FastAPI application via `python -m cms_authz.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from cms_authz.api.app import create_app
from cms_authz.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        log_level=settings.log_level.lower(),
        # Identity lookups and audit writes share one event loop; no reload in-process.
        reload=False,
    )


if __name__ == "__main__":
    main()
