"""NeoColmado search gateway: tenant index first, global catalog as fallback."""

__version__ = "1.0.0"
