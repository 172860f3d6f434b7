#This is db.py
from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, Float, String, DateTime, JSON, Boolean
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

import config

engine = None
SessionLocal = sessionmaker(expire_on_commit=False)
Base = declarative_base()


class AnalysisRecord(Base):
    __tablename__ = "analysis_records"
    id = Column(Integer, primary_key=True)
    product_name = Column(String(255), default="")
    material = Column(String(32), nullable=False)
    size = Column(String(16), nullable=False)
    width = Column(Integer, default=0)
    height = Column(Integer, default=0)
    file_size_kb = Column(Float)
    color_count = Column(Integer)
    impact_score = Column(Float)
    emissions_kg = Column(Integer)
    recommendations = Column(JSON, default=list)    # list[dict]
    ai_insights = Column(JSON, default=list)        # list[str]
    used_fallback = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() + "Z",
            "product_name": self.product_name,
            "material": self.material,
            "size": self.size,
            "dimensions": {"width": self.width, "height": self.height},
            "file_size_kb": self.file_size_kb,
            "color_count": self.color_count,
            "impact_score": self.impact_score,
            "emissions_kg": self.emissions_kg,
            "recommendations": self.recommendations or [],
            "ai_insights": self.ai_insights or [],
            "used_fallback": bool(self.used_fallback),
        }


def init_db(database_url=None):
    """
    Bind SessionLocal to `database_url` (config.DATABASE_URL by default) and
    create missing tables.

    Calling it again rebinds to a new engine (tests use "sqlite://" for a
    fresh in-memory database).
    """
    global engine
    database_url = database_url or config.DATABASE_URL
    if database_url.startswith("sqlite"):
        engine_kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory SQLite lives in a single connection; share it across sessions.
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs = {}

    engine = create_engine(database_url, **engine_kwargs)
    SessionLocal.configure(bind=engine)
    Base.metadata.create_all(engine)
    return engine
