"""Bike-share trips for Trondheim, Oslo and Bergen joined with hourly weather."""

__version__ = "0.1.0"
