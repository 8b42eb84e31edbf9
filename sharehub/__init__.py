"""ShareHub: multi-tenant event and slide sharing backend."""

__version__ = "1.0.0"
