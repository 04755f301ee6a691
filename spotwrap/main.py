"""Entry: start the API server."""
import logging

import uvicorn

from spotwrap.config import API_HOST, API_PORT


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "spotwrap.api.app:app",
        host=API_HOST,
        port=API_PORT,
    )


if __name__ == "__main__":
    run()
