"""Calculator and currency conversion engines."""

__version__ = "1.0.0"
