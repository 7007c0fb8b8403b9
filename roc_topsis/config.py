# -*- coding: utf-8 -*-
"""Configuration management for the ROC-TOPSIS ranking engine."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Union
from enum import Enum
import json


class NormalizationType(Enum):
    """Supported normalization methods."""
    VECTOR = "vector"


class WeightMethod(Enum):
    """Supported weighting methods."""
    ROC = "roc"


@dataclass
class PathConfig:
    """File and directory paths configuration."""
    base_dir: Path = field(default_factory=lambda: Path.cwd())

    @property
    def output_dir(self) -> Path:
        return self.base_dir / "outputs"

    @property
    def results_dir(self) -> Path:
        return self.output_dir / "results"

    @property
    def reports_dir(self) -> Path:
        return self.output_dir / "reports"

    @property
    def logs_dir(self) -> Path:
        return self.output_dir / "logs"

    @property
    def projects_dir(self) -> Path:
        return self.base_dir / "projects"

    def ensure_directories(self) -> None:
        """Create all necessary directories."""
        for d in [self.output_dir, self.results_dir, self.reports_dir,
                  self.logs_dir, self.projects_dir]:
            d.mkdir(parents=True, exist_ok=True)


@dataclass
class WeightingConfig:
    """
    Criterion weighting configuration.

    Parameters
    ----------
    method : WeightMethod
        Weight derivation method. Rank Order Centroid is the only one.
    sum_tolerance : float
        Allowed deviation of the weight total from 1.0 before a warning
        is logged.
    """
    method: WeightMethod = WeightMethod.ROC
    sum_tolerance: float = 1e-9


@dataclass
class TOPSISConfig:
    """TOPSIS method configuration."""
    normalization: NormalizationType = NormalizationType.VECTOR
    log_intermediate: bool = False  # dump every stage at DEBUG


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_file: Optional[str] = None
    json_file: Optional[str] = None
    console: bool = True
    use_colors: bool = False


@dataclass
class OutputConfig:
    """Result export configuration."""
    float_format: str = "%.6f"
    ranking_file: str = "ranking.csv"
    weights_file: str = "weights.csv"
    report_file: str = "report.json"


_SECTION_TYPES = {
    'weighting': (WeightingConfig, {'method': WeightMethod}),
    'topsis': (TOPSISConfig, {'normalization': NormalizationType}),
    'logging': (LoggingConfig, {}),
    'output': (OutputConfig, {}),
}


@dataclass
class Config:
    """Master configuration combining all sub-configurations."""
    paths: PathConfig = field(default_factory=PathConfig)
    weighting: WeightingConfig = field(default_factory=WeightingConfig)
    topsis: TOPSISConfig = field(default_factory=TOPSISConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @property
    def output_dir(self) -> str:
        """Get output directory path as string."""
        return str(self.paths.output_dir)

    def to_dict(self) -> Dict:
        def _to_dict(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: _to_dict(v) for k, v in obj.__dict__.items()}
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, list):
                return [_to_dict(i) for i in obj]
            elif isinstance(obj, dict):
                return {k: _to_dict(v) for k, v in obj.items()}
            return obj
        return _to_dict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Config':
        """
        Build a configuration from a (possibly partial) dictionary.

        Unknown sections and keys raise ``ValueError`` so that typos in a
        configuration file do not pass silently.
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a JSON object.")
        config = cls()
        for section, values in data.items():
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section '{section}' must be an object.")
            if section == 'paths':
                config.paths = PathConfig(base_dir=Path(values.get('base_dir', Path.cwd())))
                continue
            if section not in _SECTION_TYPES:
                raise ValueError(f"Unknown configuration section: {section}")

            section_cls, enum_fields = _SECTION_TYPES[section]
            known = {f.name for f in fields(section_cls)}
            unknown = set(values) - known
            if unknown:
                raise ValueError(f"Unknown keys in '{section}': {sorted(unknown)}")

            kwargs = {}
            for key, value in values.items():
                if key in enum_fields:
                    value = enum_fields[key](value)
                kwargs[key] = value
            setattr(config, section, section_cls(**kwargs))
        return config

    def save(self, filepath: Union[str, Path]) -> None:
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'Config':
        with open(filepath, 'r') as f:
            return cls.from_dict(json.load(f))

    def summary(self) -> str:
        return f"""
{'='*60}
CONFIGURATION SUMMARY - ROC-TOPSIS Ranking Engine
{'='*60}

WEIGHTING:
  Method: {self.weighting.method.value}
  Sum tolerance: {self.weighting.sum_tolerance}

TOPSIS:
  Normalization: {self.topsis.normalization.value}
  Log intermediate stages: {self.topsis.log_intermediate}

PATHS:
  Output: {self.paths.output_dir}
  Projects: {self.paths.projects_dir}

LOGGING:
  Level: {self.logging.level}
  Log file: {self.logging.log_file or '-'}
{'='*60}
"""


_config: Optional[Config] = None

def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config()
    return _config

def get_default_config() -> Config:
    """Get a fresh default configuration."""
    return Config()

def set_config(config: Config) -> None:
    global _config
    _config = config

def reset_config() -> None:
    global _config
    _config = Config()
