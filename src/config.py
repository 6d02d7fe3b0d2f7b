"""Configuration module for the onboarding projects service.

This module provides centralized configuration management, including directory
paths, API server settings, database and LLM configuration, and invitation
defaults. All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/onboarding.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list). The invite-code endpoint is
# called from any origin, so the default is the wildcard.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv("CORS_ALLOWED_ORIGINS", "*")
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))  # 7 days
)

# --- Invitation Configuration ---

INVITE_CODE_DEFAULT_EXPIRY_DAYS: int = int(
    os.getenv("INVITE_CODE_DEFAULT_EXPIRY_DAYS", "30")
)
INVITE_CODE_MAX_EXPIRY_DAYS: int = 365
INVITATION_EXPIRY_DAYS: int = int(os.getenv("INVITATION_EXPIRY_DAYS", "7"))

# Upper bound for each free-text documentation field
MAX_DOCUMENTATION_LENGTH: int = int(os.getenv("MAX_DOCUMENTATION_LENGTH", "20000"))

# --- LLM Configuration ---

TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))

# Default provider used for course generation
DEFAULT_LLM_PROVIDER: str = os.getenv("DEFAULT_LLM_PROVIDER", "gemini")

# Provider registry for OpenAI-compatible endpoints
LLM_PROVIDERS: Dict[str, Dict[str, Optional[str]]] = {
    "gemini": {
        "display_name": "Google Gemini",
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "default_model": "gemini-2.0-flash",
        "env_key": "GEMINI_API_KEY",
    },
    "openai": {
        "display_name": "OpenAI",
        "base_url": None,
        "default_model": "gpt-4o",
        "env_key": "OPENAI_API_KEY",
    },
    "deepseek": {
        "display_name": "DeepSeek",
        "base_url": "https://api.deepseek.com",
        "default_model": "deepseek-chat",
        "env_key": "DEEPSEEK_API_KEY",
    },
}

# Number of modules requested from the generator
COURSE_MIN_MODULES: int = 4
COURSE_MAX_MODULES: int = 6


def get_default_llm() -> Any:
    """Get the default LLM instance.

    Returns:
        A chat model configured based on DEFAULT_LLM_PROVIDER.

    Raises:
        ConfigurationError: If the provider is unknown or its API key is unset.

    Note:
        This function uses lazy import to avoid circular dependencies.
    """
    from langchain_openai import ChatOpenAI

    from core.exceptions import ConfigurationError

    provider = DEFAULT_LLM_PROVIDER
    if provider not in LLM_PROVIDERS:
        raise ConfigurationError(f"Unknown LLM provider: {provider}")

    provider_config = LLM_PROVIDERS[provider]
    api_key = os.getenv(provider_config["env_key"])

    if not api_key:
        raise ConfigurationError(
            f"{provider_config['env_key']} must be set to use {provider_config['display_name']}"
        )

    kwargs = {
        "model": provider_config["default_model"],
        "api_key": api_key,
        "temperature": TEMPERATURE,
    }
    if provider_config["base_url"]:
        kwargs["base_url"] = provider_config["base_url"]
    return ChatOpenAI(**kwargs)
