from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional

from app.db.session import get_db
from app.models.user import User
from app.schemas.user import (
    Pagination,
    ResetPasswordIn,
    SetStatusIn,
    UserAdminCreate,
    UserAdminUpdate,
    UserListOut,
    UserMessageOut,
    UserOut,
)
from app.core.security import hash_password, require_admin
from app.core.audit_log import log_audit
from app.core.enums import AuditAction, UserRole
from app.core.auth_utils import check_not_found, normalize_email
from app.core.response_builders import build_user_response, build_user_response_list

router = APIRouter(prefix="/usuarios", tags=["usuarios"])

USER_NOT_FOUND = "Usuario no encontrado"


async def _get_user(db: AsyncSession, user_id: int) -> User:
    res = await db.execute(select(User).where(User.id == user_id))
    user = res.scalars().first()
    check_not_found(user, USER_NOT_FOUND)
    return user


@router.get("/", response_model=UserListOut)
async def list_users(
    q: Optional[str] = Query(None),
    rol: Optional[UserRole] = Query(None),
    activo: Optional[bool] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    filters = []
    if q and q.strip():
        term = f"%{q.strip()}%"
        full_name = (
            User.primer_nombre + " " + func.coalesce(User.segundo_nombre, "")
            + " " + User.primer_apellido + " " + func.coalesce(User.segundo_apellido, "")
        )
        filters.append(or_(
            full_name.ilike(term),
            User.email.ilike(term),
            User.identificacion.ilike(term),
        ))
    if rol is not None:
        filters.append(User.rol == rol)
    if activo is not None:
        filters.append(User.activo == activo)

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar() or 0

    query = (
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .offset(offset)
    )
    res = await db.execute(query)
    users = res.scalars().all()

    return UserListOut(
        data=build_user_response_list(users),
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return build_user_response(await _get_user(db, user_id))


@router.post("/", response_model=UserMessageOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserAdminCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    email = normalize_email(payload.email)
    res = await db.execute(select(User.id).where(func.lower(User.email) == email))
    if res.scalars().first() is not None:
        raise HTTPException(status_code=400, detail="El email ya está registrado")

    data = payload.model_dump(exclude={"password", "rol"})
    user = User(
        **data,
        password_hash=hash_password(payload.password),
        rol=UserRole(payload.rol),
    )
    db.add(user)
    await db.flush()

    await log_audit(db, int(admin.id), AuditAction.CREATE_USER, payload)
    await db.commit()
    await db.refresh(user)

    return UserMessageOut(message="Usuario creado", user=build_user_response(user))


async def _update_user(user_id: int, payload: UserAdminUpdate, db: AsyncSession, admin: User):
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No hay campos para actualizar")

    user = await _get_user(db, user_id)
    for field, value in changes.items():
        if field == "rol" and value is not None:
            value = UserRole(value)
        setattr(user, field, value)

    db.add(user)
    await log_audit(db, int(admin.id), AuditAction.UPDATE_USER, {"id": user_id, **changes})
    await db.commit()
    await db.refresh(user)

    return UserMessageOut(message="Usuario actualizado", user=build_user_response(user))


@router.patch("/{user_id}", response_model=UserMessageOut)
async def patch_user(
    user_id: int,
    payload: UserAdminUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await _update_user(user_id, payload, db, admin)


@router.put("/{user_id}", response_model=UserMessageOut)
async def put_user(
    user_id: int,
    payload: UserAdminUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await _update_user(user_id, payload, db, admin)


@router.patch("/{user_id}/password")
async def reset_password(
    user_id: int,
    payload: ResetPasswordIn,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await _get_user(db, user_id)
    user.password_hash = hash_password(payload.newPassword)
    db.add(user)
    await log_audit(db, int(admin.id), AuditAction.RESET_PASSWORD, {"id": user_id})
    await db.commit()

    return {"message": "Password actualizado"}


@router.patch("/{user_id}/status", response_model=UserMessageOut)
async def set_status(
    user_id: int,
    payload: SetStatusIn,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await _get_user(db, user_id)
    user.activo = payload.activo
    db.add(user)
    await log_audit(db, int(admin.id), AuditAction.SET_USER_STATUS, {"id": user_id, "activo": payload.activo})
    await db.commit()
    await db.refresh(user)

    message = "Usuario activado" if payload.activo else "Usuario desactivado"
    return UserMessageOut(message=message, user=build_user_response(user))


@router.delete("/{user_id}")
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = await _get_user(db, user_id)
    user.activo = False
    db.add(user)
    await log_audit(db, int(admin.id), AuditAction.DEACTIVATE_USER, {"id": user_id})
    await db.commit()

    return {"message": "Usuario desactivado (soft delete)", "id": user_id}
