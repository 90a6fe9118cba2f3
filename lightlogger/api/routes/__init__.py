"""
API Routes Module

This module contains all API route definitions organized by resource.
"""

from . import location
from . import records
from . import export
from . import websocket

__all__ = ['location', 'records', 'export', 'websocket']
