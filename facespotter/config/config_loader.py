"""Configuration loader for FaceSpotter"""

import yaml
from pathlib import Path
from typing import Any, Dict
import os


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"


class Config:
    """Configuration manager for FaceSpotter"""

    def __init__(self, config_path: str = None):
        if config_path is None:
            config_path = os.getenv('FACESPOTTER_CONFIG')
        if config_path is None:
            env = os.getenv('FACESPOTTER_ENV', 'development')
            # Try environment-specific config first, fall back to default
            env_config = CONFIG_DIR / f"config.{env}.yaml"
            if env_config.exists():
                config_path = str(env_config)
            else:
                config_path = str(CONFIG_DIR / "config.yaml")

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'tracking.eye_open_threshold')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access"""
        return self.get(key)

    def validate(self) -> None:
        """Validate configuration values"""
        # Probability thresholds
        for key in ('tracking.eye_open_threshold', 'tracking.smile_threshold'):
            threshold = self.get(key)
            if threshold is not None and not 0 <= threshold <= 1:
                raise ValueError(f"Invalid {key}: {threshold}, must be in [0, 1]")

        # Iris simulation
        time_step = self.get('iris.time_step')
        if time_step is not None and time_step <= 0:
            raise ValueError(f"Invalid iris.time_step: {time_step}, must be positive")

        stiffness = self.get('iris.stiffness')
        if stiffness is not None and stiffness <= 0:
            raise ValueError(f"Invalid iris.stiffness: {stiffness}, must be positive")

        rest_bias = self.get('iris.rest_bias')
        if rest_bias is not None and not 0 <= rest_bias <= 1:
            raise ValueError(f"Invalid iris.rest_bias: {rest_bias}, must be in [0, 1]")

        # Identity tracking
        max_gap = self.get('detector.max_gap_frames')
        if max_gap is not None and max_gap < 0:
            raise ValueError(f"Invalid detector.max_gap_frames: {max_gap}, must be >= 0")


# Global config instance
config = Config()
