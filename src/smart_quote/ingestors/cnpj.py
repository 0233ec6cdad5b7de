from __future__ import annotations

import logging
from typing import Any

import requests

from ..formatting import only_digits
from ..models.party import Address, CompanyLookup

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://brasilapi.com.br/api/cnpj/v1"


class CnpjIngestor:
    """Company registry lookup by CNPJ through BrasilAPI."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize CNPJ ingestor.

        Args:
            base_url: BrasilAPI CNPJ endpoint
            timeout: Request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, document: str) -> CompanyLookup | None:
        """Fetch registry data for a CNPJ.

        Args:
            document: CNPJ in any punctuation

        Returns:
            CompanyLookup, or None when the id is not 14 digits or the call fails
        """
        cnpj = only_digits(document)
        if len(cnpj) != 14:
            return None

        try:
            response = self.session.get(f"{self.base_url}/{cnpj}", timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError):
            logger.error(
                "CNPJ lookup failed",
                exc_info=True,
                extra={"cnpj": cnpj},
            )
            return None

        if not isinstance(data, dict):
            logger.warning("Unexpected CNPJ lookup payload", extra={"cnpj": cnpj})
            return None

        result = self._parse_company(data)
        logger.info("Fetched CNPJ registry data", extra={"cnpj": cnpj, "company_name": result.name})
        return result

    def _parse_company(self, data: dict[str, Any]) -> CompanyLookup:
        """Parse a BrasilAPI payload into a CompanyLookup.

        Args:
            data: BrasilAPI CNPJ response body

        Returns:
            CompanyLookup instance
        """
        return CompanyLookup(
            name=self._text(data.get("razao_social")) or self._text(data.get("nome_fantasia")),
            email=self._text(data.get("email")),
            phone=self._text(data.get("ddd_telefone_1")),
            address=Address(
                cep=self._text(data.get("cep")),
                street=self._text(data.get("logradouro")),
                number=self._text(data.get("numero")),
                complement=self._text(data.get("complemento")),
                neighborhood=self._text(data.get("bairro")),
                city=self._text(data.get("municipio")),
                state=self._text(data.get("uf")),
            ),
        )

    def _text(self, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()


__all__ = ["CnpjIngestor"]
