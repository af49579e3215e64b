"""Read-only audit of a media catalog for missing, unattached and unused assets."""

__version__ = "0.1.0"
