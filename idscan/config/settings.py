"""
Application Settings.

Centraliza toda configuração via .env / variáveis de ambiente.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configurações carregadas de variáveis de ambiente."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # --- Quality Scorer ---
    min_brightness: float = 50.0
    min_blur: float = 100.0
    brightness_stride: int = 10
    blur_stride: int = 4

    # --- Capture Gate ---
    required_good_frames: int = 3
    capture_interval_seconds: float = 2.0
    camera_index: int = 0

    # --- Document Validator ---
    keyword_match_ratio: float = 0.4

    # --- OCR ---
    ocr_lang: str = "en"
    ocr_use_gpu: bool = False

    # --- Extraction ---
    vocabulary_path: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Singleton de settings."""
    return Settings()
