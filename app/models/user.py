from sqlalchemy import Boolean, Column, Enum, String
from app.models.base import BaseModel
from app.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "usuarios"
    primer_nombre = Column(String(50), nullable=False)
    segundo_nombre = Column(String(50))
    primer_apellido = Column(String(50), nullable=False)
    segundo_apellido = Column(String(50))
    email = Column(String(120), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    telefono = Column(String(40))
    celular = Column(String(40))
    identificacion = Column(String(40))
    departamento = Column(String(80))
    municipio = Column(String(80))
    direccion = Column(String(255))
    rol = Column(Enum(UserRole), nullable=False, default=UserRole.COLABORADOR)
    activo = Column(Boolean, nullable=False, default=True)

    @property
    def nombre(self) -> str:
        return f"{self.primer_nombre or ''} {self.primer_apellido or ''}".strip()
