import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.db.session import get_db
from app.models.quote import Quote
from app.models.user import User
from app.schemas.quote import (
    AutoQuoteCreate,
    EmissionRequest,
    QuoteCalculationResult,
    QuoteMailRequest,
    QuoteOut,
    QuotePdfRequest,
    QuoteStatusUpdate,
)
from app.core.security import get_current_user, require_admin
from app.core.audit_log import log_audit
from app.core.cache import cache_get_json, cache_set_json
from app.core.config import settings
from app.core.enums import AuditAction, CoverageType, QuoteStatus
from app.core.exceptions import ValuationNotFound
from app.core.metrics import quote_calculations
from app.core.rate_limit import check_rate_limit
from app.core.auth_utils import check_not_found, filter_by_owner
from app.core.response_builders import build_quote_response, build_quote_response_list
from app.repositories.catalogs import SqlQuoteLookups
from app.services.documents import (
    QuoteDocument,
    client_display_name,
    pdf_filename,
    pick_total,
    render_quote_pdf,
    today_label,
)
from app.services.email_templates import build_emission_email_html, build_quote_email_html
from app.services.mailer import Attachment, OutgoingMail, send_mail
from app.services.quote_engine import calculate_quote
from app.utils.hashing import cache_key
from app.utils.idempotency import get_idempotent, set_idempotent
from app.utils.recipients import normalize_recipients

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cotizaciones", tags=["cotizaciones"])

QUOTE_NOT_FOUND = "Cotización no encontrada"
VALUATION_NOT_FOUND = "No se encontró valor_nuevo para los parámetros dados."
MAIL_FAILED = "No se pudo enviar el correo"

VEHICLE_FIELDS = {
    "marca", "modelo", "anio", "chasis", "motor", "color", "placa", "uso_vehiculo",
    "vigencia", "circulacion_dueno", "vehiculo_danado", "cesion_derechos",
}
CLIENT_FIELDS = {
    "primer_nombre", "segundo_nombre", "primer_apellido", "segundo_apellido", "email",
    "telefono", "celular", "identificacion", "departamento", "municipio", "direccion", "parentesco",
}


def _to_float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _render_pdf(doc: QuoteDocument):
    return run_in_threadpool(render_quote_pdf, doc)


async def _pdf_attachment(doc: QuoteDocument, filename: str) -> Attachment:
    try:
        pdf = await _render_pdf(doc)
    except Exception as e:
        logger.error(f"PDF render for mail failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=MAIL_FAILED)
    return Attachment(filename, pdf, "application/pdf")


@router.get("/", response_model=List[QuoteOut])
async def list_quotes(
    tipo_seguro: Optional[str] = Query(None),
    estado: Optional[QuoteStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = filter_by_owner(select(Quote), Quote, current_user)
    if tipo_seguro:
        q = q.where(Quote.tipo_seguro == tipo_seguro)
    if estado:
        q = q.where(Quote.estado == estado)
    q = q.order_by(Quote.created_at.desc(), Quote.id.desc())

    res = await db.execute(q)
    return build_quote_response_list(res.scalars().all())


@router.post("/auto", status_code=status.HTTP_201_CREATED)
async def create_auto_quote(
    payload: AutoQuoteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await check_rate_limit(str(current_user.id), scope="quotes")

    try:
        calculo = await calculate_quote(
            SqlQuoteLookups(db),
            payload.marca,
            payload.modelo,
            payload.anio,
            payload.tipo_cobertura,
            payload.exceso_amount,
        )
    except ValuationNotFound:
        quote_calculations.labels(coverage=str(payload.tipo_cobertura), outcome="not_found").inc()
        raise HTTPException(status_code=404, detail=VALUATION_NOT_FOUND)
    quote_calculations.labels(coverage=str(payload.tipo_cobertura), outcome="success").inc()

    quote = Quote(
        usuario_id=int(current_user.id),
        tipo_seguro="auto",
        datos_vehiculo=payload.model_dump(mode="json", by_alias=True, include=VEHICLE_FIELDS),
        datos_cliente=payload.model_dump(mode="json", by_alias=True, include=CLIENT_FIELDS),
        datos_cobertura={
            "tipoCobertura": str(payload.tipo_cobertura),
            "excesoRC": payload.exceso_amount,
            "prima_total": calculo.prima_total,
            "extra_exceso": calculo.extra_exceso,
            "prima_total_con_exceso": calculo.prima_total_con_exceso,
        },
        forma_pago=str(payload.forma_pago),
        prima_calculada=calculo.prima_total_con_exceso,
        estado=QuoteStatus.PENDIENTE,
    )
    db.add(quote)
    await db.flush()

    await log_audit(db, int(current_user.id), AuditAction.CREATE_QUOTE, {"id": quote.id, **quote.datos_vehiculo})
    await db.commit()
    await db.refresh(quote)

    logger.info(f"Quote {quote.id} created by user {current_user.id}: {quote.prima_calculada:.2f}")
    return {"message": "Cotización creada exitosamente", "cotizacion": build_quote_response(quote)}


@router.get("/auto/calculo", response_model=QuoteCalculationResult)
async def calculate_auto_quote(
    marca: Optional[str] = Query(None),
    modelo: Optional[str] = Query(None),
    anio: Optional[str] = Query(None),
    tipo_cobertura: str = Query(CoverageType.AMPLIA.value, alias="tipoCobertura"),
    exceso_rc: Optional[str] = Query("0", alias="excesoRC"),
    db: AsyncSession = Depends(get_db),
):
    try:
        year = int(anio) if anio else None
    except ValueError:
        year = None
    if not marca or not modelo or year is None:
        raise HTTPException(status_code=400, detail="Parámetros requeridos: marca, modelo, anio")

    exceso = _to_float(exceso_rc)
    coverage = tipo_cobertura.lower()
    if coverage not in {c.value for c in CoverageType}:
        coverage = CoverageType.AMPLIA.value
    params = {"marca": marca.upper(), "modelo": modelo.upper(), "anio": year,
              "tipo": coverage, "exceso": exceso}
    key = cache_key("quote:calc", params)

    cached = await cache_get_json(key, metric_label="quote_calculation")
    if cached is not None:
        quote_calculations.labels(coverage=coverage, outcome="cached").inc()
        return cached

    try:
        result = await calculate_quote(SqlQuoteLookups(db), marca, modelo, year, coverage, exceso)
    except ValuationNotFound:
        quote_calculations.labels(coverage=coverage, outcome="not_found").inc()
        raise HTTPException(status_code=404, detail=VALUATION_NOT_FOUND)

    quote_calculations.labels(coverage=coverage, outcome="success").inc()
    body = result.model_dump(by_alias=True)
    await cache_set_json(key, body, ttl=settings.QUOTE_CACHE_TTL)
    return body


@router.post("/auto/pdf")
async def download_quote_pdf(payload: QuotePdfRequest):
    if not payload.marca or not payload.modelo or not payload.anio:
        raise HTTPException(status_code=400, detail="Faltan datos: marca, modelo, anio")

    doc = QuoteDocument(
        marca=payload.marca,
        modelo=payload.modelo,
        anio=payload.anio,
        items=payload.items,
        total=payload.total,
        cliente_nombre=payload.cliente_nombre,
        fecha=payload.fecha or today_label(),
    )
    try:
        pdf = await _render_pdf(doc)
    except Exception as e:
        logger.error(f"PDF render failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="No se pudo generar el PDF")
    if not pdf:
        raise HTTPException(status_code=500, detail="PDF vacío o inválido")

    filename = pdf_filename(payload.marca, payload.modelo, payload.anio)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/enviar-mail")
async def send_quote_mail(
    payload: QuoteMailRequest,
    request: Request,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    cached = await get_idempotent(idempotency_key)
    if cached:
        return cached

    await check_rate_limit(_client_ip(request), scope="mail")

    recipients = normalize_recipients(payload.to)
    if not recipients or payload.datos_vehiculo is None or payload.cliente is None:
        raise HTTPException(
            status_code=400,
            detail="Faltan campos requeridos: to (válido), datosVehiculo, cliente",
        )

    vehiculo = payload.datos_vehiculo
    subject = payload.subject or f"Cotización de Auto - {vehiculo.marca} {vehiculo.modelo} {vehiculo.anio}"
    fecha = today_label()
    cliente_nombre = client_display_name(payload.cliente)
    items = payload.calculo.items if payload.calculo else None
    total = pick_total(payload.calculo)

    html = build_quote_email_html(
        marca=vehiculo.marca,
        modelo=vehiculo.modelo,
        anio=vehiculo.anio,
        cliente_nombre=cliente_nombre,
        items=items,
        total=total,
        fecha=fecha,
    )
    mail = OutgoingMail(to=recipients, subject=subject, html=html)

    if payload.attach_pdf:
        mail.attachments.append(await _pdf_attachment(
            QuoteDocument(
                marca=vehiculo.marca,
                modelo=vehiculo.modelo,
                anio=vehiculo.anio,
                items=items or [],
                total=total,
                cliente_nombre=cliente_nombre,
                fecha=fecha,
            ),
            pdf_filename(vehiculo.marca, vehiculo.modelo, vehiculo.anio),
        ))

    if not await send_mail(mail):
        raise HTTPException(status_code=500, detail=MAIL_FAILED)

    result = {"ok": True}
    await set_idempotent(idempotency_key, result)
    return result


async def _read_upload(upload: Optional[UploadFile]) -> Optional[Attachment]:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    if not content:
        return None
    return Attachment(upload.filename, content, upload.content_type or "application/octet-stream")


@router.post("/auto/emitir-mail")
async def send_emission_mail(
    request: Request,
    data: Optional[str] = Form(None),
    circulacionFile: Optional[UploadFile] = File(None),
    cedulaFile: Optional[UploadFile] = File(None),
    cartaCompraVentaFile: Optional[UploadFile] = File(None),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    cached = await get_idempotent(idempotency_key)
    if cached:
        return cached

    await check_rate_limit(_client_ip(request), scope="mail")

    if not data:
        raise HTTPException(status_code=400, detail="Falta 'data' (JSON)")
    try:
        emission = EmissionRequest.model_validate(json.loads(data))
    except (json.JSONDecodeError, ValidationError):
        raise HTTPException(status_code=400, detail="'data' no es JSON válido")

    if not emission.marca or not emission.modelo or not emission.anio:
        raise HTTPException(status_code=400, detail="Faltan marca/modelo/año")
    if not emission.cliente_email:
        raise HTTPException(status_code=400, detail="Falta correo del cliente")

    fecha = today_label()
    mail = OutgoingMail(
        to=normalize_recipients([emission.cliente_email, *emission.to]),
        subject=f"Emisión Póliza Auto - {emission.marca} {emission.modelo} {emission.anio}",
        html=build_emission_email_html(emission, fecha),
        sender=settings.mail_from_no_reply,
    )

    for upload in (circulacionFile, cedulaFile, cartaCompraVentaFile):
        attachment = await _read_upload(upload)
        if attachment:
            mail.attachments.append(attachment)

    if emission.attach_pdf:
        mail.attachments.append(await _pdf_attachment(
            QuoteDocument(
                marca=emission.marca,
                modelo=emission.modelo,
                anio=emission.anio,
                items=emission.items,
                total=emission.total_paso2,
                cliente_nombre=emission.cliente_nombre or "",
                fecha=fecha,
            ),
            pdf_filename(emission.marca, emission.modelo, emission.anio, prefix="cotizacion"),
        ))

    if not await send_mail(mail):
        raise HTTPException(status_code=500, detail=MAIL_FAILED)

    result = {"ok": True}
    await set_idempotent(idempotency_key, result)
    return result


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = filter_by_owner(select(Quote).where(Quote.id == quote_id), Quote, current_user)
    res = await db.execute(q)
    quote = res.scalars().first()
    check_not_found(quote, QUOTE_NOT_FOUND)
    return build_quote_response(quote)


@router.patch("/{quote_id}/estado")
async def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if payload.estado not in {s.value for s in QuoteStatus}:
        raise HTTPException(status_code=400, detail="Estado no válido")

    res = await db.execute(select(Quote).where(Quote.id == quote_id))
    quote = res.scalars().first()
    check_not_found(quote, QUOTE_NOT_FOUND)

    quote.estado = QuoteStatus(payload.estado)
    quote.observaciones = payload.observaciones
    db.add(quote)
    await log_audit(db, int(admin.id), AuditAction.UPDATE_QUOTE_STATUS, {"id": quote_id, "estado": payload.estado})
    await db.commit()
    await db.refresh(quote)

    return {"message": "Estado actualizado exitosamente", "cotizacion": build_quote_response(quote)}
