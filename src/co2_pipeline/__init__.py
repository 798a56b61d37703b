"""CO2 pipeline engineering and economic optimization engine."""

__version__ = "0.1.0"
