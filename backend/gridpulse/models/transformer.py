from sqlalchemy import Column, DateTime, Float, String, JSON
from sqlalchemy.sql import func

from gridpulse.database import Base


class TransformerRecord(Base):
    """Registered distribution transformer and its configured hourly baseline."""
    __tablename__ = "transformers"

    transformer_id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    barangay = Column(String(120), index=True)
    capacity_kw = Column(Float, nullable=False)
    baseline_kw = Column(JSON)  # [kW for hour 0, ..., kW for hour 23] or null
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
