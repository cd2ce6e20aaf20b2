"""FlightWatch - weather safety monitoring for training flights."""

__version__ = "0.1.0"
