from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    log_level: str = os.getenv("CODE_TICKETS_LOG_LEVEL", "INFO").upper()
    host: str = os.getenv("CODE_TICKETS_HOST", "0.0.0.0")
    port: int = int(os.getenv("CODE_TICKETS_PORT", "8000"))
    cors_origins: List[str] = [
        o.strip() for o in os.getenv("CODE_TICKETS_CORS_ORIGINS", "*").split(",") if o.strip()
    ]


settings = Settings()
