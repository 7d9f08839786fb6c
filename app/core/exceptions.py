class NotFoundError(Exception):
    """A required record could not be resolved."""


class ValuationNotFound(NotFoundError):
    """No usable valor_nuevo row exists for a make/model/year."""

    def __init__(self, marca: str, modelo: str, anio: int):
        self.marca = marca
        self.modelo = modelo
        self.anio = anio
        super().__init__(f"No valuation found for {marca} {modelo} {anio}")
