"""Runtime configuration for the serial ingestion pipeline and the scan view."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

CONFIG_ENV_VAR = "DDISCAN_CONFIG"


@dataclass(slots=True)
class ScanConfig:
    """
    Tuning knobs for how the sensor is read, batched, and displayed.

    The defaults match the sensor firmware: 115200 baud, one record per line,
    a plot refresh of one 300-point batch at a time.
    """

    port: Optional[str] = None
    include_non_usb: bool = False

    read_timeout_ms: int = 200
    read_size: int = 1024
    batch_size: int = 300

    # Thread bridge sizing
    handoff_queue_size: int = 8

    x_max: float = 3000.0
    y_max: float = 700.0
    render_interval_ms: int = 40

    presence_poll_s: float = 1.0
    log_level: str = "INFO"

    @property
    def read_timeout_s(self) -> float:
        return self.read_timeout_ms / 1000.0

    def sanitized(self) -> ScanConfig:
        """Return a copy with derived limits applied."""
        port = str(self.port).strip() if self.port else None
        return ScanConfig(
            port=port or None,
            include_non_usb=bool(self.include_non_usb),
            read_timeout_ms=max(1, int(self.read_timeout_ms)),
            read_size=max(1, int(self.read_size)),
            batch_size=max(2, int(self.batch_size)),
            handoff_queue_size=max(1, int(self.handoff_queue_size)),
            x_max=float(self.x_max),
            y_max=float(self.y_max),
            render_interval_ms=max(1, int(self.render_interval_ms)),
            presence_poll_s=max(0.05, float(self.presence_poll_s)),
            log_level=str(self.log_level).upper(),
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`ScanConfig`."""
    return {f.name for f in fields(ScanConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten known nesting patterns (e.g. top-level ``scan`` key)."""
    if "scan" in data and isinstance(data["scan"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "scan":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> ScanConfig:
    """Build :class:`ScanConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return ScanConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return ScanConfig(**payload).sanitized()


def load_config(path: str | Path | None = None) -> ScanConfig:
    """
    Load configuration from ``path`` (or ``$DDISCAN_CONFIG`` when omitted).

    Missing files fall back to default :class:`ScanConfig`.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return ScanConfig()
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return ScanConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["CONFIG_ENV_VAR", "ScanConfig", "config_from_mapping", "load_config"]
