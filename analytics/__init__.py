"""Analytics sinks for processed interactions."""

from .base_sink import BaseAnalyticsSink
from .supabase_sink import SupabaseAnalyticsSink
from .logging_sink import LoggingAnalyticsSink

__all__ = ["BaseAnalyticsSink", "SupabaseAnalyticsSink", "LoggingAnalyticsSink"]
