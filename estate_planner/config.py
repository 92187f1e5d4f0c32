"""
config.py — Estate Planner application settings.

Usage:
    from estate_planner.config import settings
    print(settings.stress_grid_max_cells)

Never use FastAPI Depends() for settings — import directly as a module-level singleton.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- CORS ---
    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173,http://localhost:5174"

    # --- Request limits (enforced by the validation gate, not the engine) ---
    stress_grid_max_cells: int = 2_500
    optimizer_max_candidates: int = 200

    # --- Application ---
    debug: bool = True
    app_version: str = "0.1.0"

    @property
    def cors_origins_list(self) -> List[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Module-level singleton
settings = Settings()
