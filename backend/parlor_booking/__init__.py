"""Parlor Booking - appointment booking backend for a small beauty parlor."""

__version__ = "1.0.0"
