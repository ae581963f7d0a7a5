import json
from pathlib import Path
from typing import Any, Dict, Optional

from chat_translator.logger import get_logger
from chat_translator.models import ProviderConfig

logger = get_logger(__name__)

# Session timing constants (seconds)
AUTO_TRANSLATE_DELAY = 1.0
COPY_FEEDBACK_DELAY = 2.0

# Longest input accepted by the web API
MAX_TEXT_LENGTH = 5000

DEFAULT_TIMEOUT = 120

DEFAULT_SYSTEM_MESSAGE = (
    "You are a professional translator. "
    "Always respond with only the translation, no explanations."
)

DEFAULT_PROMPT = """Translate the following text from {source_language} to {target_language}.
Provide only the translation result without any explanations, prefixes, or additional text.

Text: {text}
"""

# Provider configuration constants
BUILTIN_PROVIDERS = ["deepseek", "openai"]

PROVIDER_PRESETS = {
    "deepseek": {
        "name": "DeepSeek",
        "api_url": "https://api.deepseek.com/chat/completions",
        "model": "deepseek-chat",
    },
    "openai": {
        "name": "OpenAI",
        "api_url": "https://api.openai.com/v1/chat/completions",
        "model": "gpt-3.5-turbo",
    },
}

LOG_MODES = ["off", "info", "debug"]

# Get base directory (project root)
BASE_DIR = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = BASE_DIR / "config"
CONFIG_FILE = CONFIG_DIR / "config.json"


def provider_defaults(provider: str) -> Dict[str, Any]:
    """Return the editable settings for a provider preset."""
    preset = PROVIDER_PRESETS.get(provider, PROVIDER_PRESETS["deepseek"])
    return {
        "api_url": preset["api_url"],
        "model": preset["model"],
        "prompt": DEFAULT_PROMPT,
    }


DEFAULT_CONFIG = {
    "provider": "deepseek",
    "api_key": "",
    **provider_defaults("deepseek"),
    "timeout": DEFAULT_TIMEOUT,
    "log_mode": "off",
}


def _default_config() -> Dict[str, Any]:
    return dict(DEFAULT_CONFIG)


def load_config(path: Path = CONFIG_FILE) -> Dict[str, Any]:
    """
    Load settings from the JSON config file.

    Missing keys are filled from DEFAULT_CONFIG. A missing or corrupt file
    yields the defaults; the file is not rewritten here.
    """
    config = _default_config()
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return config

    try:
        with open(path, 'r', encoding='utf-8') as f:
            stored = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file {path}: {e}")
        logger.warning("Using default configuration")
        return config
    except OSError as e:
        logger.error(f"Failed to read config file {path}: {e}")
        logger.warning("Using default configuration")
        return config

    if not isinstance(stored, dict):
        logger.warning(f"Config file {path} does not hold an object, using defaults")
        return config

    config.update(stored)
    logger.debug("Configuration loaded")
    return config


def save_config(config: Dict[str, Any], path: Path = CONFIG_FILE) -> None:
    """Save settings to the JSON config file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4, ensure_ascii=False)
        logger.info(f"Configuration saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save config to {path}: {e}")
        raise


def reset_to_defaults(path: Path = CONFIG_FILE) -> Dict[str, Any]:
    """
    Restore endpoint, model and prompt to the selected provider's preset.

    The API key, provider choice and log mode are kept.
    """
    config = load_config(path)
    config.update(provider_defaults(config.get("provider", "deepseek")))
    save_config(config, path)
    logger.info(f"Settings reset to {config.get('provider')} defaults")
    return config


def validate_settings(config: Dict[str, Any]) -> Optional[str]:
    """
    Check a settings dict before it is saved.

    Returns:
        An error message, or None if the settings are acceptable.
    """
    provider = config.get("provider")
    if provider is not None and provider not in BUILTIN_PROVIDERS:
        return f"Unknown provider: {provider}"

    for key in ("api_key", "api_url", "model", "prompt"):
        if key in config and not isinstance(config[key], str):
            return f"{key} must be a string"

    if "timeout" in config:
        timeout = config["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            return "timeout must be a positive number"

    if "log_mode" in config and config["log_mode"] not in LOG_MODES:
        return f"log_mode must be one of: {', '.join(LOG_MODES)}"

    return None


def get_provider_config(config: Optional[Dict[str, Any]] = None) -> ProviderConfig:
    """Build the read-only snapshot the translation service consumes."""
    if config is None:
        config = load_config()
    return ProviderConfig(
        api_key=config.get("api_key", ""),
        endpoint_url=config.get("api_url", ""),
        model_name=config.get("model", ""),
        prompt_template=config.get("prompt", "") or DEFAULT_PROMPT,
    )
