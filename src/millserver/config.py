"""Runtime settings read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

MIN_ROOM_CODE_LENGTH = 3


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    room_code_length: int = 5
    cors_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = tuple(
            origin.strip() for origin in env.get("MILL_CORS_ORIGINS", "*").split(",") if origin.strip()
        )
        code_length = int(env.get("MILL_ROOM_CODE_LENGTH", "5"))
        if code_length < MIN_ROOM_CODE_LENGTH:
            raise ValueError(f"MILL_ROOM_CODE_LENGTH must be at least {MIN_ROOM_CODE_LENGTH}")
        return cls(
            host=env.get("MILL_HOST", "127.0.0.1"),
            port=int(env.get("MILL_PORT", "8000")),
            log_level=env.get("MILL_LOG_LEVEL", "INFO").upper(),
            room_code_length=code_length,
            cors_origins=origins or ("*",),
        )
