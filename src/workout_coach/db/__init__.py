"""Database module for the Workout Coach store."""

from .schema import SCHEMA

__all__ = ["SCHEMA"]
