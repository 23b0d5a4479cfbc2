"""Water Curtain - pattern designer and controller for a digital water curtain."""

__version__ = "0.1.0"
