from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field
from app.core.enums import UserRole
from app.schemas.auth import EmailAddress

AdminAssignableRole = Literal["administrador", "colaborador"]


class UserAdminCreate(BaseModel):
    primer_nombre: str = Field(min_length=2, max_length=50)
    segundo_nombre: Optional[str] = Field(None, max_length=50)
    primer_apellido: str = Field(min_length=2, max_length=50)
    segundo_apellido: Optional[str] = Field(None, max_length=50)
    email: EmailAddress
    password: str = Field(min_length=8)
    telefono: Optional[str] = None
    celular: Optional[str] = None
    identificacion: Optional[str] = None
    departamento: Optional[str] = None
    municipio: Optional[str] = None
    direccion: Optional[str] = None
    rol: AdminAssignableRole
    activo: bool = True


class UserAdminUpdate(BaseModel):
    primer_nombre: Optional[str] = Field(None, min_length=2, max_length=50)
    segundo_nombre: Optional[str] = Field(None, max_length=50)
    primer_apellido: Optional[str] = Field(None, min_length=2, max_length=50)
    segundo_apellido: Optional[str] = Field(None, max_length=50)
    telefono: Optional[str] = None
    celular: Optional[str] = None
    identificacion: Optional[str] = None
    departamento: Optional[str] = None
    municipio: Optional[str] = None
    direccion: Optional[str] = None
    rol: Optional[AdminAssignableRole] = None
    activo: Optional[bool] = None


class ResetPasswordIn(BaseModel):
    newPassword: str = Field(min_length=8)


class SetStatusIn(BaseModel):
    activo: bool


class UserOut(BaseModel):
    id: int
    primer_nombre: str
    segundo_nombre: Optional[str] = None
    primer_apellido: str
    segundo_apellido: Optional[str] = None
    email: str
    telefono: Optional[str] = None
    celular: Optional[str] = None
    identificacion: Optional[str] = None
    departamento: Optional[str] = None
    municipio: Optional[str] = None
    direccion: Optional[str] = None
    rol: UserRole
    activo: bool
    fecha_registro: datetime
    fecha_actualizacion: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class UserListOut(BaseModel):
    data: List[UserOut]
    pagination: Pagination


class UserMessageOut(BaseModel):
    message: str
    user: UserOut
