"""
Light Logger

Tags ambient-light brightness readings with the current GPS fix and
exports them as CSV or GeoJSON.
"""

__version__ = "1.0.0"
