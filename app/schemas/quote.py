from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.enums import CoverageType, PaymentMethod, QuoteStatus


class CoverageLineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nombre: str
    suma_asegurada: Optional[float] = Field(None, alias="sumaAsegurada")
    suma_asegurada_label: Optional[str] = Field(None, alias="sumaAseguradaLabel")
    deducible: str = ""
    prima: float = 0.0


class QuoteCalculationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valor_nuevo: float
    factor_conversion: float
    suma_asegurada: float
    prima_danos: float
    derecho_emision: float
    iva: float
    soa: float
    prima_total: float
    exceso_rc: float = Field(0.0, alias="excesoRC")
    extra_exceso: float
    prima_total_con_exceso: float
    items: List[CoverageLineItem]
    total_paso2: float = Field(alias="totalPaso2")


class AutoQuoteCreate(BaseModel):
    """Full step form of an auto quote as posted by the web client."""

    model_config = ConfigDict(populate_by_name=True)

    marca: str = Field(min_length=1)
    modelo: str = Field(min_length=1)
    anio: int = Field(alias="año", ge=1990)
    tipo_cobertura: CoverageType = Field(alias="tipoCobertura")
    exceso_rc: Optional[Union[float, str]] = Field(None, alias="excesoRC")

    primer_nombre: str = Field(alias="primerNombre", min_length=1)
    segundo_nombre: Optional[str] = Field(None, alias="segundoNombre")
    primer_apellido: str = Field(alias="primerApellido", min_length=1)
    segundo_apellido: Optional[str] = Field(None, alias="segundoApellido")
    email: EmailStr
    telefono: str
    celular: Optional[str] = None
    identificacion: str
    departamento: str
    municipio: str
    direccion: str
    parentesco: Optional[str] = None

    chasis: Optional[str] = None
    motor: Optional[str] = None
    color: Optional[str] = None
    placa: Optional[str] = None
    uso_vehiculo: Optional[str] = Field(None, alias="usoVehiculo")
    vigencia: Optional[str] = None
    circulacion_dueno: Optional[str] = Field(None, alias="circulacionDueño")
    vehiculo_danado: Optional[str] = Field(None, alias="vehiculoDañado")
    cesion_derechos: Optional[str] = Field(None, alias="cesionDerechos")

    forma_pago: PaymentMethod = Field(alias="formaPago")
    acepta_terminos: bool = Field(alias="aceptaTerminos")

    @field_validator("anio")
    @classmethod
    def anio_not_in_future(cls, value: int) -> int:
        if value > date.today().year + 1:
            raise ValueError("año fuera de rango")
        return value

    @field_validator("acepta_terminos")
    @classmethod
    def terms_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("Debe aceptar los términos")
        return value

    @property
    def exceso_amount(self) -> float:
        try:
            return float(self.exceso_rc or 0)
        except (TypeError, ValueError):
            return 0.0


class QuoteStatusUpdate(BaseModel):
    estado: str
    observaciones: Optional[str] = None


class QuoteOut(BaseModel):
    id: int
    usuario_id: int
    tipo_seguro: str
    datos_vehiculo: Dict[str, Any]
    datos_cliente: Dict[str, Any]
    datos_cobertura: Dict[str, Any]
    forma_pago: Optional[str] = None
    prima_calculada: Optional[float] = None
    estado: QuoteStatus
    observaciones: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuotePdfRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    marca: Optional[str] = None
    modelo: Optional[str] = None
    anio: Optional[Union[int, str]] = None
    items: List[CoverageLineItem] = []
    total: float = 0.0
    cliente_nombre: str = Field("", alias="clienteNombre")
    fecha: Optional[str] = None


class VehicleData(BaseModel):
    marca: str = ""
    modelo: str = ""
    anio: Union[int, str] = ""


class QuoteCalculationSnapshot(BaseModel):
    """Calculation echoed back by the client; every figure is optional."""

    valor_nuevo: Optional[float] = None
    factor_conversion: Optional[float] = None
    suma_asegurada: Optional[float] = None
    prima_danos: Optional[float] = None
    derecho_emision: Optional[float] = None
    iva: Optional[float] = None
    soa: Optional[float] = None
    prima_total: Optional[float] = None
    prima_total_con_exceso: Optional[float] = None
    items: Optional[List[CoverageLineItem]] = None
    total_paso2: Optional[float] = Field(None, alias="totalPaso2")


class QuoteMailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: Union[str, List[str], None] = None
    subject: Optional[str] = Field(None, max_length=150)
    datos_vehiculo: Optional[VehicleData] = Field(None, alias="datosVehiculo")
    cliente: Optional[Dict[str, Any]] = None
    calculo: Optional[QuoteCalculationSnapshot] = None
    attach_pdf: bool = Field(False, alias="attachPdf")


class EmissionRequest(BaseModel):
    """JSON carried in the `data` field of the policy emission form."""

    model_config = ConfigDict(populate_by_name=True)

    marca: Optional[str] = None
    modelo: Optional[str] = None
    anio: Optional[Union[int, str]] = None
    tipo_cobertura: Optional[str] = Field(None, alias="tipoCobertura")
    exceso_rc: Optional[Union[float, str]] = Field(None, alias="excesoRC")
    items: List[CoverageLineItem] = []
    total_paso2: float = Field(0.0, alias="totalPaso2")
    cliente_nombre: Optional[str] = Field(None, alias="clienteNombre")
    cliente_email: Optional[str] = Field(None, alias="clienteEmail")
    chasis: Optional[str] = None
    motor: Optional[str] = None
    color: Optional[str] = None
    placa: Optional[str] = None
    uso_vehiculo: Optional[str] = Field(None, alias="usoVehiculo")
    vigencia: Optional[str] = None
    circulacion_dueno: Optional[str] = Field(None, alias="circulacionDueno")
    vehiculo_danado: Optional[str] = Field(None, alias="vehiculoDanado")
    descripcion_danios: Optional[str] = Field(None, alias="descripcionDanios")
    cesion_derechos: Optional[str] = Field(None, alias="cesionDerechos")
    entidad_cesion: Optional[str] = Field(None, alias="entidadCesion")
    attach_pdf: bool = Field(True, alias="attachPdf")
    to: List[str] = []
