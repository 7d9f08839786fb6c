from sqlalchemy import JSON, Column, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import QuoteStatus


class Quote(BaseModel):
    __tablename__ = "cotizaciones"

    usuario_id = Column(ForeignKey("usuarios.id"), nullable=False, index=True)
    usuario = relationship("User", backref="cotizaciones")

    tipo_seguro = Column(String(20), nullable=False, default="auto")
    datos_vehiculo = Column(JSON, nullable=False, default=dict)
    datos_cliente = Column(JSON, nullable=False, default=dict)
    datos_cobertura = Column(JSON, nullable=False, default=dict)
    forma_pago = Column(String(20))
    prima_calculada = Column(Float, nullable=True)
    estado = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.PENDIENTE)
    observaciones = Column(Text, nullable=True)
