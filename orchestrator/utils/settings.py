"""Runtime settings resolution.

Every setting the orchestrator reads at request time (workflow server URL and
key, model provider URL, key and model name) is resolved in the same order:

1. the value stored through the settings API
2. the process environment
3. a built-in default

Nothing is cached, so a value saved through the settings page is picked up on
the next request without restarting the process.
"""

import os
from collections.abc import Callable, Mapping

N8N_API_URL = "N8N_API_URL"
N8N_API_KEY = "N8N_API_KEY"
AI_BASE_URL = "AI_BASE_URL"
AI_API_KEY = "AI_API_KEY"
AI_MODEL = "AI_MODEL"

DEFAULTS: dict[str, str] = {
    N8N_API_URL: "http://localhost:5678",
    AI_BASE_URL: "https://openrouter.ai/api/v1",
    AI_MODEL: "anthropic/claude-3-sonnet",
}


class SettingsResolver:
    """Resolve a setting from the stored config, the environment, then defaults."""

    def __init__(
        self,
        lookup: Callable[[str], str | None] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """
        Args:
            lookup: returns the stored value for a key, or None
            environ: environment mapping; os.environ when omitted
        """
        self._lookup = lookup
        self._environ = environ

    def get(self, key: str, default: str | None = None) -> str | None:
        if self._lookup is not None:
            stored = self._lookup(key)
            if stored:
                return stored

        environ = self._environ if self._environ is not None else os.environ
        from_env = environ.get(key)
        if from_env:
            return from_env

        if default is not None:
            return default
        return DEFAULTS.get(key)
