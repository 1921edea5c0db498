"""Exception hierarchy for the dispatch pipeline."""


class DispatchError(Exception):
    """Base class for all pipeline errors."""


class InvalidInboundMessage(DispatchError):
    """Inbound message is missing a subscriber id or text."""


class LLMError(DispatchError):
    """Completion provider failed (timeout, non-2xx, malformed or empty output)."""


class RetrievalError(DispatchError):
    """Knowledge retrieval failed."""


class AnalyticsError(DispatchError):
    """Analytics sink rejected a record."""


class PromptConfigError(DispatchError):
    """Prompt configuration is missing or incomplete."""
