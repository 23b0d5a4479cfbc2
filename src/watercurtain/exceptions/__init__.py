"""
Exceptions raised by the water curtain controller.

## Tree

```
WaterCurtainError (base)
├── RasterizationError
├── PatternValidationError
├── DeviceError
│   ├── NotConnectedError
│   ├── ConnectionFailedError
│   └── DiscoveryExhaustedError
├── UploadError
│   ├── EmptySequenceError
│   ├── InvalidValveCountError
│   └── UploadInProgressError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Everything above derives from `WaterCurtainError`, which carries
`user_message`, `technical_message`, `recoverable` and `recovery_hint`.

### Example: Empty Text Prompt

```python
from watercurtain.exceptions import RasterizationError

raise RasterizationError("Prompt cannot be empty.", source="text")

# User sees: "Prompt cannot be empty."
# Recovery hint: "Check the input and try generating the pattern again."
```

See `watercurtain.exceptions.handlers` for utilities to handle these
exceptions systematically.
"""

from .base import WaterCurtainError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .device import (
    ConnectionFailedError,
    DeviceError,
    DiscoveryExhaustedError,
    NotConnectedError,
)
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    handle_errors,
    wrap_connection_error,
    wrap_pydantic_error,
)
from .raster import PatternValidationError, RasterizationError
from .upload import (
    EmptySequenceError,
    InvalidValveCountError,
    UploadError,
    UploadInProgressError,
)

__all__ = [
    # Base
    "WaterCurtainError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Device
    "ConnectionFailedError",
    "DeviceError",
    "DiscoveryExhaustedError",
    "NotConnectedError",
    # Patterns
    "PatternValidationError",
    "RasterizationError",
    # Upload
    "EmptySequenceError",
    "InvalidValveCountError",
    "UploadError",
    "UploadInProgressError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "handle_errors",
    "wrap_connection_error",
    "wrap_pydantic_error",
]
