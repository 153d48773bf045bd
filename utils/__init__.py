"""
Utility modules for the HF Propagation Dashboard.
"""

from .logging_config import get_logger, setup_logging
from .background_tasks import TaskManager
from .notifications import NotificationCenter

__all__ = [
    'get_logger',
    'setup_logging',
    'TaskManager',
    'NotificationCenter'
]
