"""Population tile maps: grid allocation of weighted locations."""

__version__ = "0.1.0"
