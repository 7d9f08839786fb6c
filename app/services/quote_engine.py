"""Auto insurance premium calculation and coverage table composition.

Pricing constants and the order of operations are agreed with the underwriters
and must be reproduced exactly. No rounding happens here; currency formatting
belongs to the presentation layer.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple, Union

from app.core.enums import CoverageType
from app.core.exceptions import ValuationNotFound
from app.schemas.quote import CoverageLineItem, QuoteCalculationResult

logger = logging.getLogger(__name__)

DAMAGE_RATE_PER_MILLE = 11.5
ISSUANCE_FEE_RATE = 0.02
IVA_RATE = 0.15
SOA_PREMIUM = 55
DEFAULT_FACTOR_CONVERSION = 1

DEDUCIBLE_COLISION = "20% Mínimo U$ 100.00"
DEDUCIBLE_EXTENSION = "30% Mínimo U$ 100.00"


class QuoteLookups(Protocol):
    async def valor_nuevo(self, marca: str, modelo: str, anio: int) -> Optional[float]:
        ...

    async def factor_conversion(self, anio: int) -> Optional[float]:
        ...


@dataclass(frozen=True)
class LineTemplate:
    """One row of the coverage table.

    `suma_asegurada` is a fixed amount, the name of a computed value, or None
    when the row shows `label` instead. `prima` names a computed value; rows
    without one are priced at zero.
    """

    nombre: str
    suma_asegurada: Union[float, str, None]
    deducible: str = ""
    prima: Optional[str] = None
    label: Optional[str] = None

    def render(self, values: Dict[str, float]) -> CoverageLineItem:
        if isinstance(self.suma_asegurada, str):
            suma = values[self.suma_asegurada]
        else:
            suma = self.suma_asegurada
        return CoverageLineItem(
            nombre=self.nombre,
            suma_asegurada=suma,
            suma_asegurada_label=self.label,
            deducible=self.deducible,
            prima=values[self.prima] if self.prima else 0,
        )


BASE_LINES: Tuple[LineTemplate, ...] = (
    LineTemplate("Responsabilidad Civil Del Conductor Por Muerte O Lesiones A Pasajeros", 10000),
    LineTemplate("Gastos Médicos", 10000),
    LineTemplate(
        "Colisiones Mas Robo Total O Parcial A Consecuencia De Robo Total (1)",
        "suma_asegurada",
        DEDUCIBLE_COLISION,
        prima="prima_total",
    ),
    LineTemplate("Rotura De Vidrios", 1125),
    # Insured at full value but not priced yet.
    LineTemplate("Desórdenes Públicos", "suma_asegurada", DEDUCIBLE_COLISION),
    LineTemplate("Riesgos Catastróficos", "suma_asegurada", DEDUCIBLE_COLISION),
    LineTemplate("Extensión Territorial", None, DEDUCIBLE_EXTENSION, label="Incluida"),
    LineTemplate("R. Civil obligatoria por muerte o lesiones causadas a una persona", 2500, prima="soa"),
    LineTemplate("R. Civil obligatoria por muerte o lesiones causadas a dos o mas personas", 5000),
    LineTemplate("R. Civil obligatoria por daños materiales causados a terceras personas", 2500),
)

EXCESS_LINES: Tuple[LineTemplate, ...] = (
    LineTemplate(
        "R. Civil obligatoria por muerte o lesiones causadas a una persona (EXCESO)",
        "exceso_rc",
        prima="extra_exceso",
    ),
    LineTemplate(
        "R. Civil obligatoria por muerte o lesiones causadas a dos o mas personas (EXCESO)",
        "exceso_rc_doble",
    ),
    LineTemplate(
        "R. Civil obligatoria por daños materiales causados a terceras personas (EXCESO)",
        "exceso_rc",
    ),
)


async def resolve_valor_nuevo(lookups: QuoteLookups, marca: str, modelo: str, anio: int) -> float:
    valor = await lookups.valor_nuevo(marca, modelo, anio)
    if not valor:
        raise ValuationNotFound(marca, modelo, anio)
    return float(valor)


async def resolve_factor_conversion(lookups: QuoteLookups, anio: int) -> float:
    factor = await lookups.factor_conversion(anio)
    if factor is None:
        logger.info(f"No depreciation factor for year {anio}, using {DEFAULT_FACTOR_CONVERSION}")
        return DEFAULT_FACTOR_CONVERSION
    return float(factor)


def excess_applies(tipo_cobertura: Union[CoverageType, str], exceso_rc: float) -> bool:
    return str(tipo_cobertura).lower() == CoverageType.EXCESO.value and exceso_rc > 0


def compose_quote(
    valor_nuevo: float,
    factor_conversion: float,
    tipo_cobertura: Union[CoverageType, str] = CoverageType.AMPLIA,
    exceso_rc: float = 0,
) -> QuoteCalculationResult:
    exceso_rc = exceso_rc or 0

    suma_asegurada = valor_nuevo * factor_conversion

    prima_danos = valor_nuevo * DAMAGE_RATE_PER_MILLE / 1000
    derecho_emision = prima_danos * ISSUANCE_FEE_RATE
    iva = (prima_danos + derecho_emision) * IVA_RATE
    soa = SOA_PREMIUM
    prima_total = prima_danos + derecho_emision + iva + soa

    extra_exceso = 0
    prima_total_con_exceso = prima_total
    with_excess = excess_applies(tipo_cobertura, exceso_rc)
    if with_excess:
        # Excess liability carries its own fee and tax multipliers.
        extra_exceso = (exceso_rc * 6.6666 / 1000) * 1.02 * 1.15
        prima_total_con_exceso = prima_total + extra_exceso

    values = {
        "suma_asegurada": suma_asegurada,
        "prima_total": prima_total,
        "soa": soa,
        "exceso_rc": exceso_rc,
        "exceso_rc_doble": exceso_rc * 2,
        "extra_exceso": extra_exceso,
    }
    lines = BASE_LINES + EXCESS_LINES if with_excess else BASE_LINES
    items: List[CoverageLineItem] = [line.render(values) for line in lines]

    return QuoteCalculationResult(
        valor_nuevo=valor_nuevo,
        factor_conversion=factor_conversion,
        suma_asegurada=suma_asegurada,
        prima_danos=prima_danos,
        derecho_emision=derecho_emision,
        iva=iva,
        soa=soa,
        prima_total=prima_total,
        exceso_rc=exceso_rc,
        extra_exceso=extra_exceso,
        prima_total_con_exceso=prima_total_con_exceso,
        items=items,
        total_paso2=prima_total_con_exceso,
    )


async def calculate_quote(
    lookups: QuoteLookups,
    marca: str,
    modelo: str,
    anio: int,
    tipo_cobertura: Union[CoverageType, str] = CoverageType.AMPLIA,
    exceso_rc: float = 0,
) -> QuoteCalculationResult:
    """Look up the vehicle value and depreciation, then price the quote.

    Raises ValuationNotFound when the make/model/year has no usable value.
    """
    valor_nuevo = await resolve_valor_nuevo(lookups, marca, modelo, anio)
    factor_conversion = await resolve_factor_conversion(lookups, anio)
    return compose_quote(valor_nuevo, factor_conversion, tipo_cobertura, exceso_rc)
