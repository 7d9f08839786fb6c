"""Read-only reference tables behind the quote calculation and the catalog endpoints."""
from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from app.models.base import Base


class VehicleValuation(Base):
    __tablename__ = "valor_de_nuevo"

    id = Column(Integer, primary_key=True, autoincrement=True)
    marca = Column(String(80), nullable=False, index=True)
    modelo = Column(String(120), nullable=False)
    anio = Column(Integer, nullable=False)
    valor_nuevo = Column(Float, nullable=False)


class DepreciationFactor(Base):
    __tablename__ = "depreciacion"

    id = Column(Integer, primary_key=True, autoincrement=True)
    anio = Column(Integer, nullable=False, index=True)
    factor_conversion = Column(Float, nullable=False)


class Departamento(Base):
    __tablename__ = "utils_departamento"

    id = Column(Integer, primary_key=True)
    name = Column(String(80), nullable=False)


class Municipio(Base):
    __tablename__ = "utils_municipio"

    id = Column(Integer, primary_key=True)
    name = Column(String(80), nullable=False)
    departamento_id = Column(ForeignKey("utils_departamento.id"), nullable=False)
    departamento = relationship("Departamento", backref="municipios")
