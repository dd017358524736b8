"""SQLAlchemy ORM models"""

from sqlalchemy import Column, String, DateTime, Numeric, Text
from datetime import datetime
import uuid

from .database import Base


class Record(Base):
    """Vehicle records table (column names follow the shared remote schema)"""
    __tablename__ = "registros"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Vehicle and client
    placa = Column(String(20), nullable=False, index=True)
    cliente = Column(String, nullable=False, index=True)
    modelo = Column(String, nullable=True)
    kilometraje = Column(String(20), nullable=True)
    contacto = Column(String, nullable=True)
    codigo = Column(String(50), nullable=True)

    # Work and parts: JSON-encoded line items or legacy free text
    trabajo = Column(Text, nullable=True)
    repuestos = Column(Text, nullable=True)

    costo = Column(Numeric(12, 2), nullable=True, default=0)
    # Legacy cost column kept for rows written by older clients
    cost = Column(Numeric(12, 2), nullable=True)

    estado = Column(String(20), nullable=False, default="En proceso")
    foto_url = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
