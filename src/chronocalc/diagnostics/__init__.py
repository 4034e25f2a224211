"""Diagnostics package.

Optional tools; numpy comes from the `diagnostics` extra.
"""

__all__ = ["daylength"]
