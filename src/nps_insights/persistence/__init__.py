"""
SQLAlchemy persistence layer.

- database.py: engine, session factory, table creation
- orm.py: nps_responses / topic_mentions tables
- repository.py: ResponseRepository (ingest, pending scan, enrichment writes, stats)
- exceptions.py: StoreError hierarchy
"""

from nps_insights.persistence.database import Database
from nps_insights.persistence.exceptions import (
    ResponseNotFoundError,
    StoreError,
    StoreUnavailableError,
)
from nps_insights.persistence.repository import ResponseRepository

__all__ = [
    "Database",
    "ResponseRepository",
    "StoreError",
    "StoreUnavailableError",
    "ResponseNotFoundError",
]
