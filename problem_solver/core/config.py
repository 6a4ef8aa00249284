"""
Application configuration management
"""
import re
from typing import List, Annotated
from pydantic import Field, BeforeValidator
from pydantic_settings import BaseSettings, NoDecode
from dotenv import load_dotenv

load_dotenv()


def parse_comma_separated_str(value: any) -> List[str]:
    if isinstance(value, str):
        if not value:
            return []
        return [item.strip() for item in value.split(',') if item.strip()]
    if isinstance(value, list):
        return value
    return []


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App settings
    app_name: str = "Problem Solver"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Gemini - several keys may be given for rotation
    gemini_keys: str = Field("", description="Gemini API keys separated by comma, semicolon or whitespace")
    gemini_model: str = "gemini-1.5-flash"
    solution_timeout_seconds: float = Field(60.0, gt=0)

    # Image upload limits
    max_image_size: int = 5 * 1024 * 1024  # 5MB
    max_image_dimension: int = 800
    jpeg_quality: int = Field(80, ge=1, le=95)

    # Security
    cors_origins: Annotated[List[str], NoDecode, BeforeValidator(parse_comma_separated_str)] = Field(default=["*"])
    allowed_hosts: Annotated[List[str], NoDecode, BeforeValidator(parse_comma_separated_str)] = Field(default=["*"])

    # Client
    api_base_url: str = "http://localhost:8000"

    # Logging
    log_level: str = "INFO"

    @property
    def gemini_key_list(self) -> List[str]:
        """Parse Gemini keys separated by comma, semicolon, or whitespace/newline"""
        return [k for k in re.split(r"[,;\s]+", self.gemini_keys.strip()) if k]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# Global settings instance
settings = Settings()
