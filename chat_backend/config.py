"""Configuration management for the interview chat backend."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# API Keys
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

# ============================================================
# LLM Options
# ============================================================

LLM_PROVIDERS = {
    "openai": {
        "name": "OpenAI",
        "models": {
            "gpt-4o-mini": "GPT-4o Mini — Fast & Efficient",
            "gpt-4o": "GPT-4o — High Quality",
            "gpt-4-turbo": "GPT-4 Turbo — Balanced",
        },
        "default_model": "gpt-4o-mini"
    }
}

DEFAULT_LLM_PROVIDER = "openai"
LLM_MODEL = os.getenv("OPENAI_MODEL", LLM_PROVIDERS[DEFAULT_LLM_PROVIDER]["default_model"])
LLM_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
LLM_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "500"))

# A stalled completion is treated as a normal gateway failure
LLM_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "30"))
LLM_MAX_RETRIES = int(os.getenv("OPENAI_MAX_RETRIES", "1"))

# ============================================================
# Storage
# ============================================================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interview_chat.db")

# ============================================================
# HTTP
# ============================================================
raw_origins = os.getenv("ALLOWED_ORIGINS", "*")
ALLOWED_ORIGINS = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Assistant message the client uses to probe for the candidate's name.
# It is stored like any other message but never shown in history.
NAME_PROBE_MESSAGE = "Can you tell me your good name?"
