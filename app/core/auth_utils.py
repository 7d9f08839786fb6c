"""Authentication and authorization utilities"""
from fastapi import HTTPException


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def filter_by_owner(query, model, current_user):

    return query.where(model.usuario_id == int(current_user.id))


def check_not_found(item, detail: str) -> None:

    if not item:
        raise HTTPException(status_code=404, detail=detail)
