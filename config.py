"""Global configuration values."""

import os

# Generative provider: "openai" or "gemini"
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "openai").lower()

# OpenAI-compatible endpoint (base URL is optional; None means the public API)
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL") or None
OPENAI_MODEL = os.environ.get("GIFTREC_OPENAI_MODEL", "gpt-4o")

# Gemini fallback provider
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
GEMINI_MODEL = os.environ.get("GIFTREC_GEMINI_MODEL", "gemini-2.0-flash")

# External call limits
LLM_TIMEOUT_SECONDS = float(os.environ.get("LLM_TIMEOUT_SECONDS", "10"))
LLM_MAX_RETRIES = int(os.environ.get("LLM_MAX_RETRIES", "1"))
LLM_MAX_CONCURRENCY = int(os.environ.get("LLM_MAX_CONCURRENCY", "4"))
LLM_QUEUE_TIMEOUT = float(os.environ.get("LLM_QUEUE_TIMEOUT", "2"))

# Pipeline defaults
GENERATIVE_SHORTLIST_SIZE = int(os.environ.get("GENERATIVE_SHORTLIST_SIZE", "6"))
DEFAULT_RESULT_LIMIT = int(os.environ.get("DEFAULT_RESULT_LIMIT", "12"))
LUXURY_PRICE_CEILING = float(os.environ.get("LUXURY_PRICE_CEILING", "200"))

# Toggle the generative shortlist (content-only when disabled)
USE_GENERATIVE_RECOMMENDER = os.environ.get("USE_GENERATIVE_RECOMMENDER", "true").lower() in ("1", "true", "yes")
