"""WSGI entrypoint for the recipe box API.

Containerized deployments serve the ``app`` object below with Gunicorn
(``gunicorn --bind :$PORT main:app``). ``python main.py`` starts the Flask
development server on ``PORT`` for local work.
"""

import logging
import os

from dotenv import load_dotenv

from recipebox import create_app

load_dotenv()

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app()


if __name__ == "__main__":
    app.run(port=int(os.environ.get("PORT", "5000")))


__all__ = ["app"]
