"""Configuration package exports."""

from .loader import CONFIG_ENV_VAR, ConfigLocator, load_settings
from .models import CDX_ENDPOINT, FilterConfig, Settings, compile_exclude, parse_status_codes

__all__ = [
    "CDX_ENDPOINT",
    "CONFIG_ENV_VAR",
    "ConfigLocator",
    "FilterConfig",
    "Settings",
    "compile_exclude",
    "load_settings",
    "parse_status_codes",
]
