"""Configuration management for structgraph using Pydantic models."""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".structgraph.json"
# Labels recurse once per flattened level
MAX_LABEL_DEPTH = 20


class RankDir(str, Enum):
    """Graphviz rank directions."""
    TOP_BOTTOM = "TB"
    LEFT_RIGHT = "LR"
    BOTTOM_TOP = "BT"
    RIGHT_LEFT = "RL"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging(self) -> int:
        """Map to the numeric level used by the logging module."""
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class LabelConfig(BaseModel):
    """Record label generation section."""
    max_depth: int = Field(alias="maxDepth", default=5)
    internal_prefix: str = Field(alias="internalPrefix", default="_")
    qualified_names: bool = Field(alias="qualifiedNames", default=False)
    strict_anchors: bool = Field(alias="strictAnchors", default=False)

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v):
        if v < 0:
            raise ValueError("max_depth must be >= 0")
        if v > MAX_LABEL_DEPTH:
            raise ValueError(f"max_depth must be <= {MAX_LABEL_DEPTH} to prevent excessive recursion")
        return v

    @field_validator("internal_prefix")
    @classmethod
    def validate_internal_prefix(cls, v):
        if not v:
            raise ValueError("internal_prefix must not be empty")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LayoutConfig(BaseModel):
    """Fixed layout directives written into the document header."""
    graph_name: str = Field(alias="graphName", default="recordmapping")
    rankdir: RankDir = RankDir.LEFT_RIGHT
    nodesep: float = 0.9
    ranksep: float = 0.9
    newrank: bool = True
    fontname: str = "Open Sans"
    node_fontsize: int = Field(alias="nodeFontsize", default=16)
    edge_fontsize: int = Field(alias="edgeFontsize", default=12)

    @field_validator("node_fontsize", "edge_fontsize")
    @classmethod
    def validate_fontsize(cls, v):
        if v <= 0:
            raise ValueError(f"font size must be positive, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class RendererConfig(BaseModel):
    """External renderer section."""
    executable: str = "dot"
    format: str = "png"

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        v = v.lower().lstrip(".")
        if not v.isalnum():
            raise ValueError(f"invalid image format: {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class StructGraphConfig(BaseModel):
    """Complete structgraph configuration model."""
    label: LabelConfig = Field(default_factory=LabelConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> StructGraphConfig:
    """Load configuration from an explicit file or the nearest .structgraph.json.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents; defaults apply when none exists

    Returns:
        StructGraphConfig: Loaded and validated configuration

    Raises:
        FileNotFoundError: If an explicit config file does not exist
        ValueError: If the file is not valid JSON or fails validation
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            logger.debug(f"No {CONFIG_FILENAME} found, using defaults")
            return create_default_config()
    else:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")
    try:
        return StructGraphConfig.model_validate_json(config_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find the nearest .structgraph.json in ``start_dir`` or its parents."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def create_default_config() -> StructGraphConfig:
    """Create default configuration."""
    return StructGraphConfig()
