"""Inference subsystem configuration constants."""

# Status machine timing (simulation seconds)
PREPARING_DURATION = 1.0
PROCESSING_DURATION = 1.0
THINKING_TIMEOUT = 15.0

# Neural energy deducted when the reasoning call is dispatched
INFERENCE_ENERGY_COST = 30.0

# Strategy selection: "local" (rule based) or "remote" (text-generation API)
DEFAULT_STRATEGY = "local"

# Remote reasoning endpoint defaults
DEFAULT_API_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-haiku-20240307"
DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7
ANTHROPIC_VERSION = "2023-06-01"
SYSTEM_INSTRUCTION = (
    "You are a decision system for a simulated entity. "
    "Respond only with JSON containing a \"reasoning\" string and a "
    "\"parameters\" object mapping parameter names to numbers."
)

# Client behavior
REQUEST_TIMEOUT = 30.0  # seconds of wall-clock time per HTTP attempt
MAX_RETRIES = 2
RETRY_DELAY = 1.0  # doubles on each retry

# Context construction
CONTEXT_ENTRIES_PER_KIND = 3

# Observability
RECENT_INFERENCE_BUFFER = 20
