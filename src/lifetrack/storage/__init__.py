"""MongoDB storage module for LifeTrack.

Provides persistent storage and statistics for finished runs.
"""

from .client import MongoStorageClient, retry_on_connection_failure
from .runs import RunRepository, RunStats
from .sink import RepositoryRecordSink

__all__ = [
    "MongoStorageClient",
    "RepositoryRecordSink",
    "RunRepository",
    "RunStats",
    "retry_on_connection_failure",
]
