# database.py
from sqlalchemy import create_engine, text, Column, Integer, Text, TIMESTAMP, JSON, String, Boolean
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from datetime import datetime, UTC
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class PlanSession(Base):
    __tablename__ = "plan_sessions"
    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(String, nullable=True)
    created_at = Column(TIMESTAMP, default=lambda: datetime.now(UTC))
    destination = Column(String, nullable=False)
    travel_request = Column(JSON, nullable=False)      # validated inbound request
    task = Column(Text, nullable=False)                # task string sent to the agent
    synthesis_tier = Column(String, nullable=False)    # which fallback produced the plan
    response_length = Column(Integer, nullable=False)
    stream_timed_out = Column(Boolean, default=False)
    plan_data = Column(JSON, nullable=True)            # plan returned to the caller


class SessionStore:
    """Synchronous audit log of planning runs; call from a worker thread."""

    def __init__(self, database_url: str):
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self.engine = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def init(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def save(
        self,
        *,
        request_id: str | None,
        travel_request: dict,
        task: str,
        synthesis_tier: str,
        response_length: int,
        stream_timed_out: bool,
        plan_data: dict,
    ) -> None:
        db = self.SessionLocal()
        try:
            db.add(PlanSession(
                request_id=request_id,
                destination=travel_request.get("destination", ""),
                travel_request=travel_request,
                task=task,
                synthesis_tier=synthesis_tier,
                response_length=response_length,
                stream_timed_out=stream_timed_out,
                plan_data=plan_data,
            ))
            db.commit()
            logger.info("Plan session saved to database")
        except Exception as e:
            logger.error(f"Failed to save plan session: {e}")
            db.rollback()
        finally:
            db.close()

    def count(self) -> int:
        db = self.SessionLocal()
        try:
            return db.query(PlanSession).count()
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
