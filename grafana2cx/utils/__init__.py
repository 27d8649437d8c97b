# Utils module for grafana2cx
from .env_flags import is_truthy, is_truthy_env
from .exceptions import ConfigError, DashboardParseError, Grafana2CxError, SchemaValidationError

__all__ = [
    "is_truthy", "is_truthy_env",
    "Grafana2CxError", "ConfigError", "DashboardParseError", "SchemaValidationError",
]
