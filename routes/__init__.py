"""
Route modules for the HF Propagation Dashboard.
"""

from .api import api_bp, cache

__all__ = [
    'api_bp',
    'cache'
]
