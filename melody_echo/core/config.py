"""JSON-backed settings for the exercise, the pitch sampler and the synthesizer."""

from typing import Dict, Any, Optional
import copy
import json
import os
from pathlib import Path

from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_SEQUENCE = ["C/4", "D/4", "E/4", "F/4", "G/4", "F/4", "E/4", "D/4", "C/4"]

# One JSON file per section, named <section>.json
DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "exercise": {
        "sequence": DEFAULT_SEQUENCE,
        "poll_interval": 0.2,
        "note_duration": 0.4,
        "note_gap": 0.1,
    },
    "pitch_sampler": {
        "device_id": None,
        "sample_rate": 44100,
        "hop_size": 512,
        "win_size": 2048,
        "method": "yin",
        "tolerance": 0.8,
        "min_confidence": 0.5,
        "silence_db": -40.0,
        "max_age": 0.5,
    },
    "synthesizer": {
        "sample_rate": 44100,
        "volume": 0.3,
        "attack": 0.005,
        "release": 0.05,
    },
}


def default_config_dir() -> Path:
    return Path(os.path.expanduser("~")) / ".config" / "melody_echo"


class ConfigManager:
    """Loads, edits and persists the settings sections.

    Sections missing on disk are written out with their defaults on first
    use. A file that cannot be read or parsed is reported and replaced in
    memory by the defaults; it is left untouched on disk until the section
    is next saved.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Args:
            config_dir: Directory holding the section files, or None for ~/.config/melody_echo
        """
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)
        self.configs = {
            name: self.load_config(name, defaults)
            for name, defaults in self.default_configs.items()
        }

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Read one section, filling in any keys the file lacks."""
        path = self._path(name)

        if not path.exists():
            config = copy.deepcopy(default_config)
            self.save_config(name, config)
            return config

        try:
            with open(path, "r") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
        except (OSError, ValueError) as e:
            logger.error(f"Ignoring unreadable settings in {path}: {e}")
            return copy.deepcopy(default_config)

        config = copy.deepcopy(default_config)
        config.update(stored)
        logger.info(f"Loaded {name} settings from {path}")
        return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write one section to disk; returns False if the write failed."""
        path = self._path(name)
        try:
            with open(path, "w") as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Could not write {path}: {e}")
            return False

        logger.debug(f"Saved {name} settings to {path}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """A copy of one section (empty for an unknown name)."""
        return copy.deepcopy(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Merge updates into a section and persist it."""
        if name not in self.configs:
            logger.error(f"Unknown settings section: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Restore a section's defaults and persist them."""
        if name not in self.default_configs:
            logger.error(f"Unknown settings section: {name}")
            return False

        self.configs[name] = copy.deepcopy(self.default_configs[name])
        return self.save_config(name, self.configs[name])
