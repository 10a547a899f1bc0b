"""Turtle mission dashboard backend: teleop, path recording and waypoint missions."""

__version__ = "0.1.0"
