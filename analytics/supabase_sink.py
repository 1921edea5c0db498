"""Supabase (PostgREST) analytics sink."""

import logging

import requests

from errors import AnalyticsError
from schemas.responses import AnalyticsRecord
from .base_sink import BaseAnalyticsSink

logger = logging.getLogger(__name__)


class SupabaseAnalyticsSink(BaseAnalyticsSink):
    """Inserts records into a Supabase table over the REST API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "analytics",
        timeout: float = 10
    ):
        """
        Initialize Supabase sink.

        Args:
            url: Project URL (e.g. https://xyz.supabase.co)
            api_key: Service or anon key
            table: Target table
            timeout: Request timeout in seconds
        """
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.api_key = api_key
        self.timeout = timeout

    def _get_headers(self) -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }

    @staticmethod
    def to_row(record: AnalyticsRecord) -> dict:
        """Map a record to the table's column names."""
        return {
            "subscriber_id": record.subscriber_id,
            "nombre_cliente": record.display_name,
            "categoria": record.category.value,
            "mensaje_cliente": record.sanitized_input,
            "respuesta_bot": record.sanitized_output,
            "fue_escalado": record.escalated,
            "duracion_ms": record.duration_ms,
            "idioma": record.language.value,
            "created_at": record.created_at.isoformat(),
        }

    def emit(self, record: AnalyticsRecord) -> None:
        try:
            response = requests.post(
                self.endpoint,
                json=self.to_row(record),
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise AnalyticsError(f"Supabase request failed: {e}") from e

        if response.status_code not in (200, 201, 204):
            raise AnalyticsError(
                f"Supabase returned status {response.status_code}: {response.text}"
            )
        logger.debug(f"Analytics stored for {record.subscriber_id}")
