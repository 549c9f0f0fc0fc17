"""Utility functions for the front controller.

This package provides helper functions for:
- Parsing relative expiration times
"""

from front_controller.utils.expiration import parse_expiration

__all__ = ["parse_expiration"]
