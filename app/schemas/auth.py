from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from app.core.enums import UserRole


def _lower_email(value: str) -> str:
    return value.strip().lower()


EmailAddress = Annotated[EmailStr, AfterValidator(_lower_email)]


class LoginIn(BaseModel):
    email: EmailAddress
    password: str = Field(min_length=6)


class RegisterIn(BaseModel):
    primer_nombre: str = Field(min_length=2, max_length=50)
    segundo_nombre: Optional[str] = Field(None, max_length=50)
    primer_apellido: str = Field(min_length=2, max_length=50)
    segundo_apellido: Optional[str] = Field(None, max_length=50)
    email: EmailAddress
    password: str = Field(min_length=6)
    telefono: Optional[str] = None
    celular: Optional[str] = None
    identificacion: Optional[str] = None
    departamento: Optional[str] = None
    municipio: Optional[str] = None
    direccion: Optional[str] = None


class ChangePasswordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=6)
    new_password: str = Field(alias="newPassword", min_length=8)


class TokenUser(BaseModel):
    id: int
    email: str
    nombre: Optional[str] = None
    rol: UserRole


class TokenOut(BaseModel):
    message: str
    token: str
    user: TokenUser


class VerifyOut(BaseModel):
    valid: bool = True
    user: TokenUser
