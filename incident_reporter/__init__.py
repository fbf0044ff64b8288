"""Client for reporting road-traffic incidents to the incident API."""

__version__ = "0.1.0"
