from .config import DEFAULTS_PATH, ThiessenConfig, load_config

__all__ = ["DEFAULTS_PATH", "ThiessenConfig", "load_config"]
