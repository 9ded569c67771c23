"""pocket_arcade - deterministic runner and snake simulations."""

__version__ = "0.1.0"
