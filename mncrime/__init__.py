"""Monthly and yearly crime statistics for Minneapolis and its neighborhoods."""

__version__ = "0.1.0"
