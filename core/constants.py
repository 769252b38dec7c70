"""
Constants for Bison Health settings.
Defaults mirror the shipped mobile app.
"""


# ----- Servers -----

DEFAULT_OLLAMA_HOSTNAME = "localhost"
DEFAULT_OLLAMA_PORT = 11434

DEFAULT_DOCLING_HOSTNAME = "localhost"
DEFAULT_DOCLING_PORT = 5001

MIN_PORT = 1
MAX_PORT = 65535

USER_AGENT = "BisonHealthAI/1.0"


# ----- Network -----

# Seconds, applied by httpx to every request
DEFAULT_NETWORK_TIMEOUT = 5.0

# Extra time the main-thread deadline allows on top of the httpx timeout
DEADLINE_GRACE_MS = 1000

# Model directory cache lifetime for refresh_models_if_needed
MODEL_CACHE_TTL_SECONDS = 300


# ----- Models -----

DEFAULT_CHAT_MODEL = "llama3.2"
DEFAULT_VISION_MODEL = "llava"
DEFAULT_DOCUMENT_MODEL = "llama3.2"

# Context size options: 4k, 8k, 16k, 32k, 64k
CONTEXT_SIZE_OPTIONS = (4096, 8192, 16384, 32768, 65536)
DEFAULT_CONTEXT_SIZE = 32768

NOT_AVAILABLE_SUFFIX = " (not available)"

# Prioritized chat models for first-run selection
PREFERRED_CHAT_MODELS = [
    "phi4-reasoning",
    "magistral",
    "qwen3:32b",
    "qwen3:30b",
    "gemma3:27b",
    "qwen3:14b",
]

# Prioritized vision models for first-run selection
PREFERRED_VISION_MODELS = [
    "mistral-small3.2",
    "qwen2.5vl:72b",
    "qwen2.5vl:32b",
    "qwen2.5vl:7b",
    "gemma3:27b",
    "gemma3:12b",
    "llama3.2-vision:11b",
]

# Preference entries that also match any tag of the same model
PREFIX_MATCH_MODELS = ["phi4-reasoning", "magistral", "mistral-small3.2"]
