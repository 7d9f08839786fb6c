"""
Quote document rendering.

Builds the "Indicativo de Costo y Cobertura" PDF that is downloaded from the
quote wizard and attached to outgoing e-mails.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.core.metrics import pdf_render_duration, track_duration
from app.schemas.quote import CoverageLineItem

logger = logging.getLogger(__name__)

COMPANY_NAME = "Trust Correduría de Seguros"
COMPANY_CITY = "Managua, Nicaragua"
COMPANY_PHONE = "(505) 2251 0108"
COMPANY_EMAIL = "contacto@trustcorreduria.com"
COMPANY_WEB = "www.trustcorreduria.com"
COMPANY_LOGO_URL = (
    "https://www.trustcorreduria.com/static/seguros/wp-content/uploads/2018/05/trust-logo-300px.png"
)
COMPANY_TAGLINE = "Más que una Alianza de Negocios, Una Relación de Confianza."
DISCLAIMER = (
    "*Documento de referencia, no constituye póliza. "
    "Sujeto a verificación y condiciones de la aseguradora."
)

PRIMARY = colors.HexColor("#0b5ed7")
INK = colors.HexColor("#0f172a")
MUTED = colors.HexColor("#475569")
BORDER = colors.HexColor("#e5e7eb")
HEADER_BG = colors.HexColor("#eaf2ff")
ROW_HEAD_BG = colors.HexColor("#f3f4f6")


def format_usd(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return ""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def today_label(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%d/%m/%Y")


def insured_sum_label(item: CoverageLineItem) -> str:
    if item.suma_asegurada_label is not None:
        return item.suma_asegurada_label
    if item.suma_asegurada is not None:
        return format_usd(float(item.suma_asegurada))
    return "—"


def pick_total(calculo: Any) -> float:
    """Amount to charge: total with excess, else base total, else zero."""
    if calculo is None:
        return 0.0
    for name in ("prima_total_con_exceso", "prima_total"):
        value = getattr(calculo, name, None)
        if value is None and isinstance(calculo, dict):
            value = calculo.get(name)
        if value is not None:
            return float(value)
    return 0.0


def client_display_name(cliente: Optional[dict]) -> str:
    cliente = cliente or {}
    parts = [cliente.get("Primer Nombre"), cliente.get("Primer Apellido")]
    joined = " ".join(str(p) for p in parts if p)
    return joined or cliente.get("nombre") or "Cliente"


def pdf_filename(marca: Any, modelo: Any, anio: Any, prefix: str = "cotizacion-auto") -> str:
    return f"{prefix}-{marca}-{modelo}-{anio}.pdf"


@dataclass
class QuoteDocument:
    marca: Any
    modelo: Any
    anio: Any
    items: List[CoverageLineItem] = field(default_factory=list)
    total: float = 0.0
    cliente_nombre: str = ""
    fecha: str = field(default_factory=today_label)


def _styles():
    base = getSampleStyleSheet()
    return {
        "brand": ParagraphStyle("Brand", parent=base["Normal"], fontName="Helvetica-Bold",
                                fontSize=12, textColor=INK, leading=15),
        "meta": ParagraphStyle("Meta", parent=base["Normal"], fontSize=8.5, textColor=MUTED, leading=11),
        "meta_right": ParagraphStyle("MetaRight", parent=base["Normal"], fontSize=8.5,
                                     textColor=MUTED, leading=11, alignment=TA_RIGHT),
        "title": ParagraphStyle("Title", parent=base["Heading2"], fontSize=14, textColor=INK,
                                spaceBefore=8, spaceAfter=6),
        "section": ParagraphStyle("Section", parent=base["Heading4"], fontSize=10.5, textColor=INK,
                                  spaceBefore=10, spaceAfter=4),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=8.5, textColor=INK, leading=10.5),
        "footer": ParagraphStyle("Footer", parent=base["Normal"], fontSize=8, textColor=MUTED, leading=10),
    }


def _header(doc: QuoteDocument, styles) -> Table:
    brand = [
        Paragraph(escape(COMPANY_NAME), styles["brand"]),
        Paragraph(escape(COMPANY_CITY), styles["meta"]),
        Paragraph(escape(f"Tel. {COMPANY_PHONE} • {COMPANY_EMAIL}"), styles["meta"]),
        Paragraph(escape(COMPANY_WEB), styles["meta"]),
    ]
    meta = [Paragraph(f"<b>Fecha:</b> {escape(str(doc.fecha))}", styles["meta_right"])]
    if doc.cliente_nombre:
        meta.append(Paragraph(f"<b>Cliente:</b> {escape(doc.cliente_nombre)}", styles["meta_right"]))

    header = Table([[brand, meta]], colWidths=[110 * mm, 70 * mm])
    header.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), HEADER_BG),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BOX", (0, 0), (-1, -1), 0.75, BORDER),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))
    return header


def _vehicle_table(doc: QuoteDocument, styles) -> Table:
    def kv(label, value):
        return Paragraph(f"<font color='#475569'>{label}</font><br/><b>{escape(str(value or ''))}</b>",
                         styles["cell"])

    table = Table([[kv("MARCA", doc.marca), kv("MODELO", doc.modelo), kv("AÑO", doc.anio)]],
                  colWidths=[60 * mm] * 3)
    table.setStyle(TableStyle([
        ("BOX", (0, 0), (-1, -1), 0.75, BORDER),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    return table


def _coverage_table(items: Sequence[CoverageLineItem], total: float, styles) -> Table:
    rows = [["Detalle de Coberturas", "Suma Asegurada", "Deducible", "Prima"]]
    for item in items:
        rows.append([
            Paragraph(escape(item.nombre or ""), styles["cell"]),
            insured_sum_label(item),
            Paragraph(escape(item.deducible or ""), styles["cell"]),
            format_usd(float(item.prima or 0)),
        ])
    if not items:
        rows.append(["Sin coberturas calculadas", "", "", ""])
    rows.append(["Total a Pagar:", "", "", format_usd(float(total or 0))])

    table = Table(rows, colWidths=[82 * mm, 32 * mm, 38 * mm, 28 * mm], repeatRows=1)
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), ROW_HEAD_BG),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8.5),
        ("TEXTCOLOR", (0, 0), (-1, -1), INK),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("ALIGN", (3, 0), (3, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, BORDER),
        ("BOX", (0, 0), (-1, -1), 0.75, BORDER),
        ("SPAN", (0, -1), (2, -1)),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("TEXTCOLOR", (3, -1), (3, -1), PRIMARY),
    ]
    if not items:
        style += [("SPAN", (0, 1), (-1, 1)), ("ALIGN", (0, 1), (-1, 1), "CENTER"),
                  ("TEXTCOLOR", (0, 1), (-1, 1), MUTED)]
    table.setStyle(TableStyle(style))
    return table


@track_duration(pdf_render_duration)
def render_quote_pdf(doc: QuoteDocument) -> bytes:
    """Render the quote document to PDF bytes (A4)."""
    buffer = io.BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=18 * mm,
        bottomMargin=20 * mm,
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        title="Cotización de Seguro de Automóvil",
        author=COMPANY_NAME,
    )
    styles = _styles()

    content = [
        _header(doc, styles),
        Paragraph("Indicativo de Costo y Cobertura – Seguro de Automóvil", styles["title"]),
        Paragraph("Datos del Vehículo", styles["section"]),
        _vehicle_table(doc, styles),
        Paragraph("Detalle de Coberturas", styles["section"]),
        _coverage_table(doc.items, doc.total, styles),
        Spacer(1, 10 * mm),
        Paragraph(escape(COMPANY_TAGLINE), styles["footer"]),
        Paragraph(escape(DISCLAIMER), styles["footer"]),
    ]
    pdf.build(content)

    data = buffer.getvalue()
    logger.info(f"Rendered quote PDF for {doc.marca} {doc.modelo} {doc.anio}: {len(data)} bytes")
    return data
