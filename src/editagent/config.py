# editagent: Environment-driven defaults, read once at process start by the front end and the provider factory.

import os

# Provider selection and credentials
AI_PROVIDER = os.environ.get("AI_PROVIDER", "anthropic").strip().lower()
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY") or os.environ.get("code_editing_agent_api_key", "")
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

# Model ids
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-3-5-haiku-latest")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash-001")

# Output token budget per round-trip
MAX_OUTPUT_TOKENS = int(os.environ.get("EDITAGENT_MAX_OUTPUT_TOKENS", "1024"))

# Tool hops allowed within one user turn (1 = tool call, then a single follow-up)
MAX_TOOL_HOPS = int(os.environ.get("EDITAGENT_MAX_TOOL_HOPS", "1"))

# run_tests subprocess timeout
TEST_TIMEOUT_SEC = float(os.environ.get("EDITAGENT_TEST_TIMEOUT_SEC", "60"))

# Provider HTTP transport
HTTP_TIMEOUT_SEC = float(os.environ.get("EDITAGENT_HTTP_TIMEOUT_SEC", "240"))
HTTP_RETRIES = int(os.environ.get("EDITAGENT_HTTP_RETRIES", "2") or "0")
