"""MimiPro Admin: delivery settlement, stock ledger and sync tracking."""

from .constants import APP_NAME, APP_VERSION

__version__ = APP_VERSION

__all__ = ["APP_NAME", "__version__"]
