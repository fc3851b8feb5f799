"""
Session Use Cases

Session synchronization and registration completion.
"""

from .session_synchronizer import SessionSynchronizer

__all__ = ["SessionSynchronizer"]
