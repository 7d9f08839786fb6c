from enum import Enum


class UserRole(str, Enum):
    ADMINISTRADOR = "administrador"
    COLABORADOR = "colaborador"
    CLIENTE = "cliente"

    def __str__(self):
        return self.value


class CoverageType(str, Enum):
    AMPLIA = "amplia"
    EXCESO = "exceso"

    def __str__(self):
        return self.value


class QuoteStatus(str, Enum):
    PENDIENTE = "pendiente"
    APROBADA = "aprobada"
    RECHAZADA = "rechazada"
    EN_REVISION = "en_revision"

    def __str__(self):
        return self.value


class PaymentMethod(str, Enum):
    DEBITO = "debito"
    DEPOSITO = "deposito"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    LOGIN = "login"
    REGISTER = "register"
    CHANGE_PASSWORD = "change_password"
    CREATE_USER = "create_user"
    UPDATE_USER = "update_user"
    RESET_PASSWORD = "reset_password"
    SET_USER_STATUS = "set_user_status"
    DEACTIVATE_USER = "deactivate_user"
    CREATE_QUOTE = "create_quote"
    UPDATE_QUOTE_STATUS = "update_quote_status"

    def __str__(self):
        return self.value
