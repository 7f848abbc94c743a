"""
Shared types, checks and path mapping for WebP Express

The package is a dependency of the converter, the backend and the CLI:
- Backend uses it to validate requests and to map sources to destinations
- Converter uses it for the converter registry
- CLI uses it for config files

Deployment:
    pip install webp-express
"""

from .config import (
    WebPExpressConfig,
    generate_wod_options,
    load_config_and_fix,
    save_config,
)
from .converters import (
    CONVERTER_IDS,
    active_converters,
    get_converter_by_id,
)
from .errors import (
    SanityCheckError,
    ValidationError,
    WebPExpressError,
)
from .paths import (
    find_source,
    get_destination,
)
from .protocol import (
    AjaxConvertParams,
    AjaxResponse,
    CheckStage,
    ConversionRequest,
    ConversionResult,
    StageFailure,
)

__all__ = [
    # Config
    "WebPExpressConfig",
    "generate_wod_options",
    "load_config_and_fix",
    "save_config",
    # Converters
    "CONVERTER_IDS",
    "active_converters",
    "get_converter_by_id",
    # Errors
    "WebPExpressError",
    "SanityCheckError",
    "ValidationError",
    # Paths
    "get_destination",
    "find_source",
    # Protocol
    "AjaxConvertParams",
    "AjaxResponse",
    "CheckStage",
    "ConversionRequest",
    "ConversionResult",
    "StageFailure",
]
