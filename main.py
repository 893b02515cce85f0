"""Run the Macro Indicators API with uvicorn.

Usage:
    python main.py
    uvicorn main:app --reload
"""

import uvicorn

from src.api import create_app
from src.shared.config import Config

app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_level=Config.LOG_LEVEL.lower())
