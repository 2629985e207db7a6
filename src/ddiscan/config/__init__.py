"""Configuration objects and helpers for DDiScan.

Settings come from an optional YAML file (``--config`` or ``$DDISCAN_CONFIG``)
and are exposed as the typed :class:`~ddiscan.config.runtime.ScanConfig`,
which the link, pipeline and GUI all read.
"""

from .runtime import CONFIG_ENV_VAR, ScanConfig, config_from_mapping, load_config

__all__ = ["CONFIG_ENV_VAR", "ScanConfig", "config_from_mapping", "load_config"]
