import os
from typing import Mapping, Optional

from errors import ConfigError
from services.generation_client import DEFAULT_MODEL, DEFAULT_TIMEOUT

API_KEY_VAR = "OPENAI_API_KEY"
MODEL_VAR = "SKETCH_ASSIST_MODEL"
TIMEOUT_VAR = "SKETCH_ASSIST_TIMEOUT"


class AppContext:
    """Holds configuration for one application session.

    Settings live in memory only; the settings menu edits them for the
    running session.
    """

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: Optional[float] = DEFAULT_TIMEOUT):
        if not api_key:
            raise ConfigError(f"{API_KEY_VAR} is not set.")
        self.api_key = api_key
        self.timeout = timeout
        self.settings = {
            'model': model,
            'theme': 'darkly',
            'history_display_limit': 5,
            'copy_reset_ms': 2000,
            'verbose': True,
            'activity_console_visible': True,
            'activity_log_file': None,
        }

    @property
    def model(self) -> str:
        return self.settings['model']

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "AppContext":
        """Build a context from environment variables (after ``.env`` is loaded)."""
        env = os.environ if environ is None else environ
        api_key = env.get(API_KEY_VAR, '').strip()
        if not api_key:
            raise ConfigError(
                f"{API_KEY_VAR} is not set. Add it to your environment or to a .env file."
            )
        model = env.get(MODEL_VAR, '').strip() or DEFAULT_MODEL
        raw_timeout = env.get(TIMEOUT_VAR, '').strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as exc:
            raise ConfigError(f"{TIMEOUT_VAR} must be a number of seconds, got {raw_timeout!r}.") from exc
        if timeout <= 0:
            raise ConfigError(f"{TIMEOUT_VAR} must be positive.")
        return cls(api_key, model=model, timeout=timeout)


__all__ = ['AppContext', 'API_KEY_VAR', 'MODEL_VAR', 'TIMEOUT_VAR']
