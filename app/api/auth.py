from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.auth import ChangePasswordIn, LoginIn, RegisterIn, TokenOut, VerifyOut
from app.schemas.user import UserOut
from app.models.user import User
from app.db.session import get_db
from app.core.security import create_access_token, get_current_user, hash_password, verify_password
from app.core.enums import UserRole
from app.core.audit_log import log_audit
from app.core.enums import AuditAction
from app.core.auth_utils import normalize_email
from app.core.rate_limit import check_rate_limit
from app.core.response_builders import build_token_user, build_user_response

router = APIRouter(prefix="/auth", tags=["auth"])


async def _find_by_email(db: AsyncSession, email: str):
    res = await db.execute(select(User).where(func.lower(User.email) == normalize_email(email)))
    return res.scalars().first()


@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    await check_rate_limit(payload.email, scope="login")

    user = await _find_by_email(db, payload.email)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")
    if not user.activo:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario inactivo")
    if not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciales inválidas")

    await log_audit(db, int(user.id), AuditAction.LOGIN, {"email": payload.email})
    await db.commit()

    token = create_access_token(user)
    return TokenOut(message="Login exitoso", token=token, user=build_token_user(user))


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    existing_user = await _find_by_email(db, payload.email)
    if existing_user:
        raise HTTPException(status_code=400, detail="El usuario ya existe")

    data = payload.model_dump(exclude={"password"})
    new_user = User(
        **data,
        password_hash=hash_password(payload.password),
        rol=UserRole.COLABORADOR,
        activo=True,
    )
    db.add(new_user)
    await db.flush()

    await log_audit(db, int(new_user.id), AuditAction.REGISTER, payload)
    await db.commit()
    await db.refresh(new_user)

    token = create_access_token(new_user)
    return TokenOut(message="Usuario creado exitosamente", token=token, user=build_token_user(new_user))


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    return build_user_response(current_user)


@router.patch("/me/password")
async def change_password(
    payload: ChangePasswordIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="La contraseña actual no es correcta")

    current_user.password_hash = hash_password(payload.new_password)
    db.add(current_user)
    await log_audit(db, int(current_user.id), AuditAction.CHANGE_PASSWORD)
    await db.commit()

    return {"message": "Contraseña actualizada correctamente"}


@router.get("/verify", response_model=VerifyOut)
async def verify(current_user: User = Depends(get_current_user)):
    return VerifyOut(valid=True, user=build_token_user(current_user))
