# editagent: Provider selection. Resolves provider name, credentials and model from
# explicit arguments, then settings['api'], then the environment defaults in config.

from typing import Any, Dict, Optional

from . import config
from .anthropic_provider import AnthropicProvider
from .context import Context
from .gemini_provider import GeminiProvider
from .provider import HttpModelProvider
from .settings import section

_ALIASES = {
    "anthropic": "anthropic",
    "claude": "anthropic",
    "gemini": "gemini",
    "google": "gemini",
}


def resolve_provider_name(name: Optional[str]) -> str:
    key = (name or "").strip().lower()
    if key not in _ALIASES:
        raise ValueError(f"Unknown provider '{name}'. Choose one of: anthropic, gemini")
    return _ALIASES[key]


def create_provider(
    provider: Optional[str] = None,
    settings: Optional[Dict[str, Any]] = None,
    ctx: Optional[Context] = None,
) -> HttpModelProvider:
    """
    Build a provider instance.

    Precedence (highest first): the `provider` argument, settings['api'] values
    (provider, api_key, model, base_url), then environment defaults.
    Raises ValueError for an unknown provider and ProviderError when no API key is found.
    """
    api_cfg = section(settings or {}, "api")
    name = resolve_provider_name(provider or api_cfg.get("provider") or config.AI_PROVIDER)
    kwargs: Dict[str, Any] = {
        "base_url": api_cfg.get("base_url"),
        "timeout": config.HTTP_TIMEOUT_SEC,
        "max_retries": config.HTTP_RETRIES,
        "ctx": ctx,
    }
    if name == "gemini":
        return GeminiProvider(
            api_cfg.get("api_key") or config.GOOGLE_API_KEY,
            model=api_cfg.get("model") or config.GEMINI_MODEL,
            **kwargs,
        )
    return AnthropicProvider(
        api_cfg.get("api_key") or config.ANTHROPIC_API_KEY,
        model=api_cfg.get("model") or config.ANTHROPIC_MODEL,
        **kwargs,
    )
