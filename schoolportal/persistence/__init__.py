"""
Persistence Module — Local store, cloud endpoint and the coordinator between them.
"""

from .coordinator import LoadResult, PersistenceCoordinator, SaveResult, SyncStatus
from .local_store import LocalStore
from .remote import PushReceipt, RemoteSyncAdapter, RemoteSyncError

__all__ = [
    "PersistenceCoordinator",
    "LoadResult",
    "SaveResult",
    "SyncStatus",
    "LocalStore",
    "RemoteSyncAdapter",
    "RemoteSyncError",
    "PushReceipt",
]
