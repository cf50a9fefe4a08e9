"""
Shared types for image derivation.

The package is a dependency of the converter and of any host that
embeds it:
- Configuration and logging setup
- Format descriptors and the format registry
- Request/result types and path helpers

Deployment:
    pip install imgopt
"""

from .config import OptimizerConfig
from .errors import (
    DecodeError,
    EncodeError,
    ImgOptError,
    UnsupportedSourceError,
)
from .files import (
    DerivedPaths,
    derived_paths,
    is_in_dir,
    resolve_source,
    source_extension,
)
from .formats import FormatRegistry, FormatSpec
from .log import configure_logging
from .models import ConversionRequest, DerivedImages

__all__ = [
    # Config
    "OptimizerConfig",
    "configure_logging",
    # Errors
    "ImgOptError",
    "UnsupportedSourceError",
    "DecodeError",
    "EncodeError",
    # Formats
    "FormatSpec",
    "FormatRegistry",
    # Models
    "ConversionRequest",
    "DerivedImages",
    # Files
    "DerivedPaths",
    "is_in_dir",
    "source_extension",
    "resolve_source",
    "derived_paths",
]
