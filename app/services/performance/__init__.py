from app.services.performance.engine import PerformanceEngine, ScoreOutcome
from app.services.performance.provider import RecordProvider, SqlRecordProvider

__all__ = ["PerformanceEngine", "RecordProvider", "ScoreOutcome", "SqlRecordProvider"]
