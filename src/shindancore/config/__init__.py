from .config import (
    Config,
    DomainProfile,
    FeatureConfig,
    HttpConfig,
    MonitoringConfig,
    RendererConfig,
    find_config_file,
)

__all__ = [
    "Config",
    "DomainProfile",
    "FeatureConfig",
    "HttpConfig",
    "MonitoringConfig",
    "RendererConfig",
    "find_config_file",
]
