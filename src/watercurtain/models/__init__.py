"""Data models for the water curtain controller."""

from .color import Color
from .config import AP_DEFAULT_ADDRESS, AppConfig
from .enums import ConnectionState, PatternSource
from .pattern import Matrix, Pattern, PatternDraft, check_matrix, concat_matrices

__all__ = [
    "AP_DEFAULT_ADDRESS",
    # Models
    "AppConfig",
    "Color",
    "Matrix",
    "Pattern",
    "PatternDraft",
    # Enums
    "ConnectionState",
    "PatternSource",
    # Helpers
    "check_matrix",
    "concat_matrices",
]
