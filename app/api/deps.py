from fastapi import Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.services.performance import PerformanceEngine, SqlRecordProvider


def get_performance_engine(db: Session = Depends(get_db)) -> PerformanceEngine:
    """Performance engine bound to the request's database session.

    Override this dependency in tests to score against in-memory records.
    """
    return PerformanceEngine(SqlRecordProvider(db))
