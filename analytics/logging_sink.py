"""Analytics sink that only logs records."""

import logging

from schemas.responses import AnalyticsRecord
from .base_sink import BaseAnalyticsSink

logger = logging.getLogger(__name__)


class LoggingAnalyticsSink(BaseAnalyticsSink):
    """Used when no analytics backend is configured."""

    def emit(self, record: AnalyticsRecord) -> None:
        logger.info(
            f"Interaction: subscriber={record.subscriber_id} category={record.category.value} "
            f"language={record.language.value} escalated={record.escalated} "
            f"duration={record.duration_ms}ms"
        )
