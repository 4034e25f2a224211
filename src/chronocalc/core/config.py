from __future__ import annotations
from dataclasses import dataclass, replace
import os
from typing import Mapping, Optional

from .errors import InvalidInputError
from .time import resolve_zone

ENV_PREFIX = "CHRONOCALC_"


@dataclass(frozen=True)
class ChronoConfig:
    """
    Process defaults for the convenience API and CLI.
    Periodicities are not configuration: callers pass them explicitly.
    """
    default_zone: str = "UTC"
    solar_cache_size: int = 4096
    coordinate_precision: int = 7  # decimal places kept in solar cache keys (~1 cm)

    def __post_init__(self) -> None:
        resolve_zone(self.default_zone)
        if self.solar_cache_size < 0:
            raise InvalidInputError(f"solar_cache_size cannot be negative: {self.solar_cache_size}")
        if self.coordinate_precision < 0:
            raise InvalidInputError(f"coordinate_precision cannot be negative: {self.coordinate_precision}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ChronoConfig":
        env = os.environ if environ is None else environ
        cfg = cls()
        if f"{ENV_PREFIX}ZONE" in env:
            cfg = replace(cfg, default_zone=env[f"{ENV_PREFIX}ZONE"])
        for name, field_name in (("SOLAR_CACHE_SIZE", "solar_cache_size"),
                                 ("COORD_PRECISION", "coordinate_precision")):
            raw = env.get(f"{ENV_PREFIX}{name}")
            if raw is None:
                continue
            try:
                value = int(raw)
            except ValueError as e:
                raise InvalidInputError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e
            cfg = replace(cfg, **{field_name: value})
        return cfg


_config: Optional[ChronoConfig] = None


def get_config() -> ChronoConfig:
    global _config
    if _config is None:
        _config = ChronoConfig.from_env()
    return _config


def set_config(cfg: ChronoConfig) -> None:
    global _config
    _config = cfg
