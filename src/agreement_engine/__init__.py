"""Pay agreement resolution and compliance engine."""

__version__ = "1.0.0"
