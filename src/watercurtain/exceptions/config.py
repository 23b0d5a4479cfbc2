"""Errors reading or validating the configuration file."""

from typing import Any

from .base import WaterCurtainError

# Extra guidance keyed by a fragment of the field name
_FIELD_HINTS = (
    (("address", "candidates"), "Addresses are IPv4 dotted-quad strings, e.g. 192.168.4.1"),
    (("valve",), "Valve counts must be a positive multiple of 8"),
    (("color",), "Colors use the #RRGGBB form, e.g. #7DF9FF"),
    (("speed",), "Speed is the tick interval in milliseconds, between 20 and 500"),
)


class ConfigurationError(WaterCurtainError):
    """The configuration cannot be loaded, validated or saved."""


class ConfigFileInvalidError(ConfigurationError):
    """The config file is not parseable JSON."""

    def __init__(self, file_path: str, parse_error: str):
        problem = parse_error.lower()
        if "trailing comma" in problem:
            user_msg = "Configuration file has a trailing comma"
            recovery = (
                f"Remove the comma after the last item in {file_path}; "
                "JSON does not allow trailing commas."
            )
        else:
            user_msg = (
                "Configuration file has a syntax error"
                if "expected" in problem or "expecting" in problem
                else "Configuration file has invalid syntax"
            )
            recovery = (
                f"Fix {file_path} by hand (look for unquoted strings and "
                "unclosed braces), or delete it to start from defaults."
            )

        super().__init__(
            user_message=user_msg,
            technical_message=f"JSON parse error in {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=recovery,
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """A config value has the wrong type or is out of range."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: str | None = None):
        lines = [f"Update the '{field}' value in your configuration"]
        if file_path:
            lines.append(f"Config file: {file_path}")

        lowered = field.lower()
        for fragments, hint in _FIELD_HINTS:
            if any(fragment in lowered for fragment in fragments):
                lines.append(hint)
                break

        super().__init__(
            user_message=f"Invalid configuration value for '{field}': {error_msg}",
            technical_message=f"Config validation failed for {field}={value!r}: {error_msg}",
            recoverable=True,
            recovery_hint="\n".join(lines),
        )
        self.field = field
        self.value = value
        self.file_path = file_path
