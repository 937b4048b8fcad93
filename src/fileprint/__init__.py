"""Fast file identity fingerprints."""

__version__ = "0.1.0"
