from firescan.config import ViewerConfig, load_config, resolve_config_path
from firescan.errors import ClientInitError, ConfigError, FireScanError, QueryError, TemplateError

__version__ = "0.1.0"

__all__ = [
    "ClientInitError",
    "ConfigError",
    "FireScanError",
    "QueryError",
    "TemplateError",
    "ViewerConfig",
    "__version__",
    "load_config",
    "resolve_config_path",
]
