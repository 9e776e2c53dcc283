"""taskbase - live, groupable task lists compiled from saved selections."""

__version__ = "0.3.0"
