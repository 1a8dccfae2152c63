"""Shipping domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ApiError


class InvalidCepError(ApiError):
    status_code = 400

    def __init__(self, message: str = "Invalid CEP") -> None:
        super().__init__(message)


class CepNotFoundError(ApiError):
    status_code = 404

    def __init__(self, cep: str = "") -> None:
        super().__init__("CEP not found")
        self.cep = cep


class ShippingUnavailableError(ApiError):
    """A shipping provider (or the CEP lookup) could not be reached."""

    status_code = 500
