"""
Read-only queries over the valuation, depreciation and geography tables.

Every function receives an AsyncSession explicitly and never writes.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Departamento, DepreciationFactor, Municipio, VehicleValuation

# Excluded from filtered department searches.
HIDDEN_DEPARTAMENTO_IDS = (18,)


class SqlQuoteLookups:
    """Valuation and depreciation lookups used by the quote engine."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def valor_nuevo(self, marca: str, modelo: str, anio: int) -> Optional[float]:
        stmt = select(func.max(VehicleValuation.valor_nuevo)).where(
            func.upper(VehicleValuation.marca) == func.upper(marca),
            func.upper(VehicleValuation.modelo) == func.upper(modelo),
            VehicleValuation.anio == anio,
        )
        res = await self.db.execute(stmt)
        value = res.scalar()
        return float(value) if value is not None else None

    async def factor_conversion(self, anio: int) -> Optional[float]:
        stmt = (
            select(DepreciationFactor.factor_conversion)
            .where(DepreciationFactor.anio == anio)
            .limit(1)
        )
        res = await self.db.execute(stmt)
        value = res.scalars().first()
        return float(value) if value is not None else None


async def list_marcas(db: AsyncSession) -> list[str]:
    marca = func.trim(VehicleValuation.marca)
    stmt = (
        select(marca.label("marca"))
        .where(VehicleValuation.marca.is_not(None), marca != "")
        .distinct()
        .order_by(marca.asc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_modelos(db: AsyncSession, marca: str) -> list[str]:
    modelo = func.trim(VehicleValuation.modelo)
    stmt = (
        select(modelo.label("modelo"))
        .where(
            VehicleValuation.marca.ilike(f"%{marca}%"),
            VehicleValuation.modelo.is_not(None),
            modelo != "",
        )
        .distinct()
        .order_by(modelo.asc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_anios(db: AsyncSession, marca: str, modelo: str) -> list[int]:
    stmt = (
        select(VehicleValuation.anio)
        .where(
            func.trim(func.lower(VehicleValuation.marca)) == func.trim(func.lower(marca)),
            func.trim(func.lower(VehicleValuation.modelo)) == func.trim(func.lower(modelo)),
            VehicleValuation.anio.is_not(None),
        )
        .distinct()
        .order_by(VehicleValuation.anio.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_departamentos(db: AsyncSession, q: Optional[str] = None) -> list[dict]:
    stmt = select(Departamento.id, Departamento.name).order_by(Departamento.name.asc())
    if q:
        stmt = stmt.where(
            Departamento.name.ilike(f"%{q}%"),
            Departamento.id.not_in(HIDDEN_DEPARTAMENTO_IDS),
        )
    res = await db.execute(stmt)
    return [{"id": row.id, "name": row.name} for row in res.all()]


async def list_municipios(
    db: AsyncSession,
    *,
    departamento: Optional[str] = None,
    departamento_id: Optional[int] = None,
    q: Optional[str] = None,
) -> list[str]:
    """Municipality names of a department picked by id or by name substring."""
    name = func.trim(Municipio.name)
    stmt = (
        select(name.label("name"))
        .join(Departamento, Departamento.id == Municipio.departamento_id)
        .where(Municipio.name.is_not(None), name != "")
    )
    if departamento_id is not None:
        stmt = stmt.where(Municipio.departamento_id == departamento_id)
    else:
        stmt = stmt.where(Departamento.name.ilike(f"%{departamento.strip()}%"))
    if q and q.strip():
        stmt = stmt.where(Municipio.name.ilike(f"%{q.strip()}%"))

    stmt = stmt.distinct().order_by(name.asc())
    res = await db.execute(stmt)
    return list(res.scalars().all())
