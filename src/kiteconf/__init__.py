"""kiteconf - safe, versioned editor for PageKite configuration."""

__version__ = "0.3.0"
