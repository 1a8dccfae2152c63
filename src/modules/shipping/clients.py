"""HTTP clients for the shipping collaborators.

- ``MelhorEnvioClient``: carrier quotes (``/shipment/calculate``).
- ``ViaCepClient``: postal-code look-ups, cached in the Django cache.

Both accept an optional ``requests.Session`` so callers can share
connection pools (and tests can pass a stub).  Transport failures and
unexpected responses surface as ``ShippingUnavailableError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
import structlog
from django.core.cache import cache

from modules.shipping.constants import (
    MELHOR_ENVIO_SANDBOX_URL,
    MELHOR_ENVIO_URL,
    MELHOR_ENVIO_USER_AGENT,
    VIACEP_URL,
)
from modules.shipping.dtos import CepAddressDTO, PackageDTO
from modules.shipping.exceptions import ShippingUnavailableError

logger = structlog.get_logger(__name__)

CEP_CACHE_PREFIX = "viacep:"


class MelhorEnvioClient:
    def __init__(
        self,
        token: str,
        sandbox: bool = False,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._token = token
        self._base_url = MELHOR_ENVIO_SANDBOX_URL if sandbox else MELHOR_ENVIO_URL
        self._timeout = timeout
        self._session = session or requests.Session()

    def calculate(
        self, origin_cep: str, destination_cep: str, package: PackageDTO
    ) -> List[Dict[str, Any]]:
        """Return the raw quote list (options may carry an ``error`` key)."""
        payload = {
            "from": {"postal_code": origin_cep},
            "to": {"postal_code": destination_cep},
            "products": [package.to_provider()],
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": MELHOR_ENVIO_USER_AGENT,
        }
        try:
            response = self._session.post(
                f"{self._base_url}/shipment/calculate",
                json=payload,
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            options = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("melhor_envio.request_failed", error=str(exc))
            raise ShippingUnavailableError("Shipping provider unavailable") from exc

        if not isinstance(options, list):
            logger.warning("melhor_envio.unexpected_response", response_type=type(options).__name__)
            raise ShippingUnavailableError("Shipping provider returned an unexpected response")
        return options


class ViaCepClient:
    def __init__(
        self,
        timeout: float = 10,
        cache_timeout: int = 86400,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._timeout = timeout
        self._cache_timeout = cache_timeout
        self._session = session or requests.Session()

    def lookup(self, cep: str) -> Optional[CepAddressDTO]:
        """Return the address for an 8-digit ``cep`` or ``None`` if unknown.

        Both hits and misses are cached.
        """
        key = f"{CEP_CACHE_PREFIX}{cep}"
        data = cache.get(key)
        if data is None:
            data = self._fetch(cep)
            cache.set(key, data, self._cache_timeout)

        if data.get("erro"):
            return None
        return CepAddressDTO(
            cep=cep,
            street=data.get("logradouro") or "",
            neighborhood=data.get("bairro") or "",
            city=data.get("localidade") or "",
            state=(data.get("uf") or "").upper(),
        )

    def _fetch(self, cep: str) -> Dict[str, Any]:
        try:
            response = self._session.get(VIACEP_URL.format(cep=cep), timeout=self._timeout)
            # ViaCEP answers 400 for malformed CEPs and {"erro": true} for unknown ones.
            if response.status_code == 400:
                return {"erro": True}
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("viacep.request_failed", cep=cep, error=str(exc))
            raise ShippingUnavailableError("CEP lookup unavailable") from exc

        if not isinstance(data, dict):
            raise ShippingUnavailableError("CEP lookup returned an unexpected response")
        if data.get("erro") in (True, "true"):
            return {"erro": True}
        return data
