"""Pipeline configuration loaded from YAML.

Example file (every section and key is optional):

    detector:
      n_features: 0
      contrast_threshold: 0.04
    recognition:
      dim: 128
      vote_threshold: 50
    vocabulary:
      n_words: 500
      kmeans:
        max_iterations: 10
        tolerance: 1e-3
        init: random
        seed: 42
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .features.detector import DESCRIPTOR_DIM
from .recognition.classifier import VOTE_THRESHOLD
from .vocabulary.kmeans import KMeansConfig


@dataclass
class DetectorConfig:
    """SIFT detector parameters."""

    n_features: int = 0  # 0 keeps every keypoint
    contrast_threshold: float = 0.04
    edge_threshold: float = 10.0
    sigma: float = 1.6

    def __post_init__(self) -> None:
        if self.n_features < 0:
            raise ValueError(f"n_features must be >= 0, got {self.n_features}")


@dataclass
class RecognitionConfig:
    """Reference table format and vote reporting."""

    dim: int = DESCRIPTOR_DIM  # Feature vector dimension in the tables
    vote_threshold: int = VOTE_THRESHOLD  # Votes below this are reported as low confidence
    delimiter: str = "\t"

    def __post_init__(self) -> None:
        if self.dim < 1:
            raise ValueError(f"dim must be >= 1, got {self.dim}")
        if not self.delimiter:
            raise ValueError("delimiter must not be empty")


@dataclass
class VocabularyConfig:
    """Vocabulary size and clustering parameters."""

    n_words: int = 500
    kmeans: KMeansConfig = field(default_factory=KMeansConfig)

    def __post_init__(self) -> None:
        if self.n_words < 1:
            raise ValueError(f"n_words must be >= 1, got {self.n_words}")


@dataclass
class Config:
    """Complete configuration of both pipelines."""

    detector: DetectorConfig = field(default_factory=DetectorConfig)
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)


def _build_section(cls: type, section: Any, name: str) -> Any:
    """Instantiate a config dataclass from a YAML mapping."""
    if section is None:
        return cls()
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping, got {type(section).__name__}")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(unknown)}")

    # YAML 1.1 reads exponent notation without a dot (1e-3) as a string
    float_keys = {f.name for f in fields(cls) if f.type == "float"}
    values = dict(section)
    for key in float_keys & set(values):
        value = values[key]
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, str)):
            try:
                values[key] = float(value)
            except ValueError as e:
                raise ConfigError(
                    f"Invalid section '{name}': {key} must be a number, got '{value}'"
                ) from e

    try:
        return cls(**values)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid section '{name}': {e}") from e


def load_config(path: str | Path) -> Config:
    """Load configuration from a YAML file.

    Args:
        path: YAML file path

    Returns:
        Config with defaults for every absent section or key

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If a section is not a mapping, has unknown keys, or
            holds an invalid value
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")

    unknown = sorted(set(data) - {"detector", "recognition", "vocabulary"})
    if unknown:
        raise ConfigError(f"Unknown sections in {path}: {', '.join(unknown)}")

    vocabulary_section = data.get("vocabulary")
    if isinstance(vocabulary_section, dict) and "kmeans" in vocabulary_section:
        vocabulary_section = dict(vocabulary_section)
        vocabulary_section["kmeans"] = _build_section(
            KMeansConfig, vocabulary_section["kmeans"], "vocabulary.kmeans"
        )

    return Config(
        detector=_build_section(DetectorConfig, data.get("detector"), "detector"),
        recognition=_build_section(RecognitionConfig, data.get("recognition"), "recognition"),
        vocabulary=_build_section(VocabularyConfig, vocabulary_section, "vocabulary"),
    )
