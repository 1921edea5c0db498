"""Analytics sink interface."""

from abc import ABC, abstractmethod

from schemas.responses import AnalyticsRecord


class BaseAnalyticsSink(ABC):
    """Accepts interaction records. Callers never wait on or retry emission."""

    @abstractmethod
    def emit(self, record: AnalyticsRecord) -> None:
        """
        Store one record.

        Raises:
            AnalyticsError: If the record was rejected
        """
        pass
