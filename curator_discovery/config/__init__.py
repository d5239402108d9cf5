from .config import Config, load_config, split_keys, validate_config

__all__ = ["Config", "load_config", "split_keys", "validate_config"]
