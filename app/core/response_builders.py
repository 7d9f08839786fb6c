from app.models.user import User
from app.models.quote import Quote
from app.schemas.auth import TokenUser
from app.schemas.user import UserOut
from app.schemas.quote import QuoteOut


def build_user_response(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        primer_nombre=user.primer_nombre,
        segundo_nombre=user.segundo_nombre,
        primer_apellido=user.primer_apellido,
        segundo_apellido=user.segundo_apellido,
        email=user.email,
        telefono=user.telefono,
        celular=user.celular,
        identificacion=user.identificacion,
        departamento=user.departamento,
        municipio=user.municipio,
        direccion=user.direccion,
        rol=user.rol,
        activo=user.activo,
        fecha_registro=user.created_at,
        fecha_actualizacion=user.updated_at,
    )


def build_token_user(user: User) -> TokenUser:
    return TokenUser(id=user.id, email=user.email, nombre=user.nombre, rol=user.rol)


def build_quote_response(quote: Quote) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        usuario_id=quote.usuario_id,
        tipo_seguro=quote.tipo_seguro,
        datos_vehiculo=quote.datos_vehiculo or {},
        datos_cliente=quote.datos_cliente or {},
        datos_cobertura=quote.datos_cobertura or {},
        forma_pago=quote.forma_pago,
        prima_calculada=quote.prima_calculada,
        estado=quote.estado,
        observaciones=quote.observaciones,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def build_user_response_list(users: list) -> list:
    return [build_user_response(user) for user in users]


def build_quote_response_list(quotes: list) -> list:
    return [build_quote_response(quote) for quote in quotes]
