"""
blogdesk.api.__main__

Process entrypoint: `python -m blogdesk.api` or the `blogdesk-api` script.

Responsibilities:
- Build the app from `BLOGDESK_*` settings.
- Serve it with uvicorn on `api_host:api_port` (3001 by default, the port the
  dashboard frontend expects).

The broker is not contacted here; the first `/api/generate` call connects it.
"""

from __future__ import annotations

import uvicorn

from blogdesk.api.app import create_app
from blogdesk.observability.logging import get_logger
from blogdesk.settings import get_settings

log = get_logger(__name__)


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)
    log.info("serving", host=settings.api_host, port=settings.api_port, env=settings.env)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        # Logging is already configured by `create_app`; keep uvicorn's dictConfig out.
        log_config=None,
    )


if __name__ == "__main__":
    main()
