#!/usr/bin/env python3
"""Entry point to run the CareerDesk API server."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

import uvicorn

from careerdesk.config import get_env
from careerdesk.log import get_logger

log = get_logger(__name__)


def main() -> None:
    from careerdesk.api import create_app

    host = get_env("HOST", "127.0.0.1")
    port = int(get_env("PORT", "8000") or 8000)
    app = create_app()
    log.info("Serving CareerDesk API on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
