"""Database connection module for the progression engine.

Imported explicitly by deployments that persist progress in Cassandra; the
pure evaluators never touch it.
"""

from progression.core.database.async_cassandra import (
    AsyncCassandraConnection,
    init_async_cassandra,
    shutdown_async_cassandra,
)


__all__ = [
    "AsyncCassandraConnection",
    "init_async_cassandra",
    "shutdown_async_cassandra",
]
