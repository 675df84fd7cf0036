import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".spacedeck"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

def _env_bool(name: str, default: Any) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")

def load_config() -> Dict[str, Any]:
    """Load config from ~/.spacedeck/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., SPACEDECK_SCHEDULE env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    scheduler_cfg = config.get("scheduler", {})
    config["scheduler"] = {
        **scheduler_cfg,
        "preset": os.getenv("SPACEDECK_SCHEDULE", scheduler_cfg.get("preset", "flat")).lower(),
        "fail_delay_seconds": int(os.getenv(
            "SPACEDECK_FAIL_DELAY_SECONDS", scheduler_cfg.get("fail_delay_seconds", 60)
        )),
        "easy_bonus": float(os.getenv("SPACEDECK_EASY_BONUS", scheduler_cfg.get("easy_bonus", 1.3))),
    }
    session_cfg = config.get("session", {})
    config["session"] = {
        "study_persists": _env_bool("STUDY_PERSISTS", session_cfg.get("study_persists", True)),
        "practice_persists": _env_bool("PRACTICE_PERSISTS", session_cfg.get("practice_persists", False)),
        "shuffle_practice": _env_bool("SHUFFLE_PRACTICE", session_cfg.get("shuffle_practice", False)),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("SPACEDECK_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('scheduler', 'preset')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
