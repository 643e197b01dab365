"""
Reliability Module — Pending push queue with backoff.
"""

from .retry_queue import PendingPush, PendingPushQueue

__all__ = ["PendingPush", "PendingPushQueue"]
