"""edgy - edge-case state analysis for extracted design screens."""

__version__ = "0.1.0"
