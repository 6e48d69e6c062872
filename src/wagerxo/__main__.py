"""Entry point for running WagerXO via ``python -m wagerxo``."""

from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    """Start the FastAPI-powered WagerXO web server."""

    logging.basicConfig(
        level=os.environ.get("WAGERXO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    host = os.environ.get("WAGERXO_HOST", "0.0.0.0")
    port = int(os.environ.get("WAGERXO_PORT", "8000"))
    uvicorn.run("wagerxo.ui:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
