"""HTML bodies for outgoing quote and emission e-mails."""
from html import escape
from typing import Any, Optional, Sequence

from app.schemas.quote import CoverageLineItem
from app.services.documents import (
    COMPANY_CITY,
    COMPANY_EMAIL,
    COMPANY_LOGO_URL,
    COMPANY_NAME,
    COMPANY_PHONE,
    COMPANY_WEB,
    format_usd,
    insured_sum_label,
)

CELL = "padding:8px;border:1px solid #e5e7eb"
LABEL_CELL = "padding:10px 12px;background:#f9fafb;border-top:1px solid #e5e7eb;"
VALUE_CELL = "padding:10px 12px;border-top:1px solid #e5e7eb;"
SECTION_HEAD = "background:#f3f4f6;padding:10px 12px;font-weight:600;"
BOX = "border:1px solid #e5e7eb;border-radius:8px;overflow:hidden;"

QUOTE_FOOTER = (
    "Enviado automáticamente desde Trust Correduría. "
    "Este mensaje podría contener información confidencial."
)
EMISSION_FOOTER = "Alerta automática – Cliente emitió una póliza de auto."


def _text(value: Any) -> str:
    return escape("" if value is None else str(value))


def _yes_no(value: Optional[str]) -> str:
    return "Sí" if value == "si" else "No"


def _header() -> str:
    return f"""
<tr><td style="padding:18px 24px;background:#eaf2ff;border-bottom:1px solid #dbeafe;">
  <table role="presentation" width="100%"><tr>
    <td style="vertical-align:middle;"><img src="{COMPANY_LOGO_URL}" alt="{_text(COMPANY_NAME)}" style="display:block;height:46px;"></td>
    <td style="text-align:right;font-size:12px;line-height:1.5;color:#1f2937;">
      <div style="font-weight:700;color:#111827;">{_text(COMPANY_NAME)}</div>
      <div style="color:#374151;">{_text(COMPANY_CITY)}</div>
      <div style="color:#374151;">Tel. {COMPANY_PHONE} • <a href="mailto:{COMPANY_EMAIL}" style="color:#1e40af;text-decoration:none;">{COMPANY_EMAIL}</a></div>
      <div><a href="https://{COMPANY_WEB}" style="color:#1e40af;text-decoration:none;">{COMPANY_WEB}</a></div>
    </td>
  </tr></table>
</td></tr>"""


def _wrap(body: str, footer: str) -> str:
    return f"""
<div style="background:#f5f7fb;padding:24px 0;margin:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial;color:#111827;">
<table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="border-collapse:collapse;"><tr><td align="center">
<table role="presentation" width="680" cellspacing="0" cellpadding="0" style="background:#ffffff;border:1px solid #e5e7eb;border-radius:10px;overflow:hidden;">
{_header()}
{body}
<tr><td style="padding:14px 24px;color:#6b7280;font-size:12px;border-top:1px solid #e5e7eb;">{_text(footer)}</td></tr>
</table>
</td></tr></table>
</div>"""


def _title_block(fecha: str, title: str, recipient_line: str) -> str:
    return f"""
<tr><td style="padding:20px 24px 8px 24px;">
  <div style="font-size:14px;color:#6b7280;margin-bottom:4px;">Fecha: <strong>{_text(fecha)}</strong></div>
  <h2 style="margin:0 0 4px 0;font-size:18px;letter-spacing:.3px;">{_text(title)}</h2>
  <div style="font-size:14px;color:#374151;margin-top:2px;">{recipient_line}</div>
</td></tr>"""


def _vehicle_rows(pairs: Sequence[tuple]) -> str:
    rows = []
    for start in range(0, len(pairs), 3):
        cells = "".join(
            f'<td style="width:16.6%;{LABEL_CELL}">{label}</td><td style="width:16.6%;{VALUE_CELL}">{_text(value)}</td>'
            for label, value in pairs[start:start + 3]
        )
        rows.append(f"<tr>{cells}</tr>")
    return f"""
<tr><td style="padding:8px 24px 16px 24px;">
  <table role="presentation" width="100%" style="{BOX}">
    <tr><td colspan="6" style="{SECTION_HEAD}">Datos del Vehículo</td></tr>
    {"".join(rows)}
  </table>
</td></tr>"""


def _coverage_block(items: Sequence[CoverageLineItem], total: float, empty_label: str) -> str:
    body = "".join(
        f"""<tr>
  <td style="{CELL}">{_text(item.nombre)}</td>
  <td style="{CELL};text-align:right">{_text(insured_sum_label(item))}</td>
  <td style="{CELL}">{_text(item.deducible)}</td>
  <td style="{CELL};text-align:right">{format_usd(float(item.prima or 0))}</td>
</tr>"""
        for item in items
    )
    if not body:
        body = f'<tr><td colspan="4" style="padding:10px;text-align:center;color:#6b7280">{_text(empty_label)}</td></tr>'
    return f"""
<tr><td style="padding:0 24px 16px 24px;">
  <table role="presentation" width="100%" style="{BOX}">
    <thead><tr style="background:#f3f4f6">
      <th align="left" style="padding:10px 12px;font-weight:600;border-bottom:1px solid #e5e7eb;">Detalle de Coberturas</th>
      <th align="right" style="padding:10px 12px;font-weight:600;border-bottom:1px solid #e5e7eb;">Suma Asegurada</th>
      <th align="left" style="padding:10px 12px;font-weight:600;border-bottom:1px solid #e5e7eb;">Deducible</th>
      <th align="right" style="padding:10px 12px;font-weight:600;border-bottom:1px solid #e5e7eb;">Prima</th>
    </tr></thead>
    <tbody>{body}</tbody>
    <tfoot><tr>
      <td colspan="3" align="right" style="padding:12px;border-top:1px solid #e5e7eb;"><b>Total a Pagar:</b></td>
      <td align="right" style="padding:12px;border-top:1px solid #e5e7eb;"><b>{format_usd(float(total or 0))}</b></td>
    </tr></tfoot>
  </table>
</td></tr>"""


def build_quote_email_html(
    *,
    marca: Any,
    modelo: Any,
    anio: Any,
    cliente_nombre: str,
    items: Optional[Sequence[CoverageLineItem]],
    total: float,
    fecha: str,
) -> str:
    """Body of the "Indicativo de costo y cobertura" mail; coverages only when a calculation came along."""
    body = _title_block(fecha, "INDICATIVO DE COSTO Y COBERTURA", f"Sr(a). <strong>{_text(cliente_nombre)}</strong>")
    body += _vehicle_rows([("MARCA", marca), ("MODELO", modelo), ("AÑO", anio)])
    if items is not None:
        body += _coverage_block(items, total, "Sin coberturas calculadas")
    return _wrap(body, QUOTE_FOOTER)


def build_emission_email_html(request, fecha: str) -> str:
    """Body of the policy emission notice sent to the client and the agents."""
    recipient = (
        f"Cliente: <strong>{_text(request.cliente_nombre)}</strong> "
        f"&lt;{_text(request.cliente_email)}&gt;"
    )
    body = _title_block(fecha, "EMISIÓN DE PÓLIZA – AUTO", recipient)
    body += _vehicle_rows([
        ("MARCA", request.marca), ("MODELO", request.modelo), ("AÑO", request.anio),
        ("CHASIS", request.chasis), ("MOTOR", request.motor), ("COLOR", request.color),
        ("PLACA", request.placa), ("USO", request.uso_vehiculo), ("VIGENCIA", request.vigencia),
    ])

    damages = _yes_no(request.vehiculo_danado)
    if request.vehiculo_danado == "si" and request.descripcion_danios:
        damages += f" — {_text(request.descripcion_danios)}"
    assignment = _yes_no(request.cesion_derechos)
    if request.cesion_derechos == "si":
        assignment += f" — {_text(request.entidad_cesion)}"

    conditions = [
        ("Circulación a nombre del dueño actual", _yes_no(request.circulacion_dueno)),
        ("Vehículo presenta daños", damages),
        ("Cesión de derechos", assignment),
    ]
    rows = "".join(
        f'<tr><td style="width:40%;{LABEL_CELL}">{label}</td><td style="{VALUE_CELL}">{value}</td></tr>'
        for label, value in conditions
    )
    body += f"""
<tr><td style="padding:0 24px 16px 24px;">
  <table role="presentation" width="100%" style="{BOX}">
    <tr><td colspan="2" style="{SECTION_HEAD}">Condiciones</td></tr>
    {rows}
  </table>
</td></tr>"""
    body += _coverage_block(request.items, request.total_paso2, "Sin coberturas")
    return _wrap(body, EMISSION_FOOTER)
