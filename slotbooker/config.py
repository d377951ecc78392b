"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """Relational store settings."""
    url: str = "sqlite:///slotbooker.db"
    echo: bool = False


class AuthConfig(BaseModel):
    """Token signing and password hashing settings."""
    jwt_secret: str
    algorithm: str = "HS256"
    token_ttl_hours: int = 24
    password_hash_rounds: int = 12

    @field_validator("jwt_secret")
    @classmethod
    def validate_secret(cls, value: str) -> str:
        """Reject empty or trivially short signing secrets."""
        if len(value) < 8:
            raise ValueError("jwt_secret must be at least 8 characters long")
        return value

    @field_validator("token_ttl_hours")
    @classmethod
    def validate_ttl(cls, value: int) -> int:
        """Ensure tokens expire in the future."""
        if value <= 0:
            raise ValueError("token_ttl_hours must be greater than zero")
        return value

    @field_validator("password_hash_rounds")
    @classmethod
    def validate_rounds(cls, value: int) -> int:
        """bcrypt accepts cost factors between 4 and 31."""
        if not 4 <= value <= 31:
            raise ValueError(f"password_hash_rounds must be between 4 and 31, got {value}")
        return value


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {value}")
        return value


class GenerationConfig(BaseModel):
    """Limits for slot generation."""
    max_days: int = 366

    @field_validator("max_days")
    @classmethod
    def validate_max_days(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_days must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    auth: AuthConfig
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalise and check the logging level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Read and validate a YAML configuration file.

        Raises:
            FileNotFoundError: If the file is missing
            ValueError: If the YAML is malformed or a value fails validation
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Return ./config.yaml, or the copy at the project root when absent."""
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
