from .loaders import ConfigLoadError, load_engine_config, load_yaml_config
from .models import EngineConfig, RankRules, RemoteSettings

__all__ = [
    "ConfigLoadError",
    "EngineConfig",
    "RankRules",
    "RemoteSettings",
    "load_engine_config",
    "load_yaml_config",
]
