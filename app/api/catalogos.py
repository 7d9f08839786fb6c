"""Vehicle and geography catalogs with Redis caching"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.core.cache import cache_get_json, cache_set_json
from app.core.config import settings
from app.repositories import catalogs
from app.utils.hashing import cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/catalogos", tags=["catalogos"])


def _required(value: Optional[str], detail: str) -> str:
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail=detail)
    return value.strip()


async def _cached(name: str, params: dict, loader):
    key = cache_key(f"catalog:{name}", params)
    cached = await cache_get_json(key, metric_label=f"catalog_{name}")
    if cached is not None:
        return cached
    result = await loader()
    await cache_set_json(key, result, ttl=settings.CATALOG_CACHE_TTL)
    return result


@router.get("/marcas", response_model=List[str])
async def get_marcas(db: AsyncSession = Depends(get_db)):
    return await _cached("marcas", {}, lambda: catalogs.list_marcas(db))


@router.get("/modelos", response_model=List[str])
async def get_modelos(marca: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    marca = _required(marca, "Parámetro 'marca' es requerido")
    return await _cached("modelos", {"marca": marca.lower()}, lambda: catalogs.list_modelos(db, marca))


@router.get("/anios", response_model=List[int])
async def get_anios(
    marca: Optional[str] = Query(None),
    modelo: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if not (marca and marca.strip()) or not (modelo and modelo.strip()):
        raise HTTPException(status_code=400, detail="Parámetros 'marca' y 'modelo' son requeridos")
    params = {"marca": marca.strip().lower(), "modelo": modelo.strip().lower()}
    return await _cached("anios", params, lambda: catalogs.list_anios(db, marca, modelo))


@router.get("/departamentos")
async def get_departamentos(q: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    q = q.strip() if q else None
    return await _cached("departamentos", {"q": q}, lambda: catalogs.list_departamentos(db, q))


@router.get("/municipios", response_model=List[str])
async def get_municipios(
    response: Response,
    departamento: Optional[str] = Query(None),
    departamento_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if departamento_id is None and not (departamento and departamento.strip()):
        raise HTTPException(status_code=400, detail="Parámetro 'departamento' o 'departamento_id' es requerido")

    params = {
        "departamento": departamento.strip().lower() if departamento else None,
        "departamento_id": departamento_id,
        "q": q.strip() if q else None,
    }
    result = await _cached(
        "municipios",
        params,
        lambda: catalogs.list_municipios(db, departamento=departamento, departamento_id=departamento_id, q=q),
    )
    response.headers["Cache-Control"] = f"public, max-age={settings.CATALOG_CACHE_TTL}"
    return result
