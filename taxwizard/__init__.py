"""Federal income tax determination engine for the tax preparation wizard."""

__version__ = "0.1.0"
