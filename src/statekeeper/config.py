import os
import logging
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .core.errors import InvalidConfiguration
from .core.state import DEFAULT_MAX_DEPTH, State

log = logging.getLogger("statekeeper.config")

# Project root is two levels up from src/statekeeper/
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"


def load_config(config_path: str = None) -> dict:
    """Load configuration from YAML file with .env overrides."""
    load_dotenv(PROJECT_ROOT / ".env")

    config_path = config_path or os.environ.get("STATEKEEPER_CONFIG")
    yaml_path = Path(config_path) if config_path else CONFIG_DIR / "default_states.yaml"
    if not yaml_path.exists():
        log.warning("Config file not found: %s — using defaults", yaml_path)
        config = {}
    else:
        with open(yaml_path) as f:
            config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise InvalidConfiguration(
            f"{yaml_path} must hold a mapping, got {type(config).__name__}"
        )

    states = config.setdefault("states", {})
    if states is None:
        states = config["states"] = {}
    if not isinstance(states, dict):
        raise InvalidConfiguration(
            f"'states' in {yaml_path} must be a mapping, got {type(states).__name__}"
        )
    for name in states:
        # YAML 1.1 loads bare YES/NO/ON/OFF as booleans
        if not isinstance(name, str):
            raise InvalidConfiguration(
                f"State name {name!r} in {yaml_path} is not a string; "
                "quote it (YES, NO, ON and OFF load as booleans)"
            )

    # Environment variable overrides
    logging_cfg = config.setdefault("logging", {})
    logging_cfg["level"] = os.environ.get("LOG_LEVEL", logging_cfg.get("level", "INFO"))

    state_cfg = config.setdefault("state", {})
    try:
        state_cfg["max_depth"] = int(
            os.environ.get("STATEKEEPER_MAX_DEPTH", state_cfg.get("max_depth", DEFAULT_MAX_DEPTH))
        )
    except ValueError as e:
        raise InvalidConfiguration(f"max_depth must be an integer: {e}") from e
    state_cfg["initial"] = os.environ.get("STATEKEEPER_INITIAL", state_cfg.get("initial"))

    log.info(
        "Config loaded — %d states, initial %s, max depth %d",
        len(states),
        state_cfg["initial"] or "(first declared)",
        state_cfg["max_depth"],
    )
    return config


def build_state(config: dict) -> State:
    """Create a State from a config dict returned by load_config()."""
    states = {
        name: {} if context is None else context
        for name, context in (config.get("states") or {}).items()
    }
    state_cfg = config.get("state", {})
    state = State(states, max_depth=state_cfg.get("max_depth", DEFAULT_MAX_DEPTH))

    initial = state_cfg.get("initial")
    if initial:
        if initial not in state:
            raise InvalidConfiguration(f"Initial state is not declared: {initial}")
        state.set_by_name(initial)
    return state
