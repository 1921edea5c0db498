"""Pipeline orchestrator: one inbound message in, one response out."""

import time
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from config.settings import Settings
from errors import InvalidInboundMessage
from schemas.context import Category
from schemas.inbound import InboundMessage
from schemas.responses import AnalyticsRecord, PipelineResult, PipelineStatus
from utils.language import detect_language
from utils.sanitize import sanitize_text

# State
from storage.base import BaseStateStore
from storage.in_memory import InMemoryStateStore
from storage.sqlite_store import SQLiteStateStore
from ratelimit.limiter import RateLimiter
from memory.conversation_memory import ConversationMemory

# LLM components
from llm.factory import create_clients_from_settings
from llm.base_client import BaseLLMClient

# Collaborators
from retrieval.base_provider import BaseKnowledgeProvider
from retrieval.knowledge_api_provider import KnowledgeAPIProvider
from retrieval.local_knowledge import LocalKnowledgeBase
from channels.base_channel import BaseChannel
from channels.manychat_channel import ManyChatChannel
from channels.console_channel import ConsoleChannel
from analytics.base_sink import BaseAnalyticsSink
from analytics.supabase_sink import SupabaseAnalyticsSink
from analytics.logging_sink import LoggingAnalyticsSink

# Agents
from agents.profiles import PromptCatalog
from agents.classifier import ClassifierAgent
from agents.dispatcher import AgentDispatcher
from agents.escalation import EscalationNotifier

logger = logging.getLogger(__name__)


class DispatchOrchestrator:
    """
    Sequences rate limiting, classification, dispatch, escalation, delivery
    and analytics for each inbound message.

    Every admitted message gets a response: failures after admission end in
    the language fallback text. Admin alerts and analytics run as detached
    tasks whose failures are logged and never reach the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        llm_client: Optional[BaseLLMClient] = None,
        classifier_client: Optional[BaseLLMClient] = None,
        store: Optional[BaseStateStore] = None,
        channel: Optional[BaseChannel] = None,
        analytics_sink: Optional[BaseAnalyticsSink] = None,
        knowledge_provider: Optional[BaseKnowledgeProvider] = None,
        catalog: Optional[PromptCatalog] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize orchestrator.

        Components not passed in are built from settings.

        Args:
            settings: Application settings
            llm_client: Completion provider for agent replies
            classifier_client: Completion provider for classification
                (defaults to llm_client when that is given)
            store: Keyed state store for rate limits and memory
            channel: Outbound messaging channel
            analytics_sink: Analytics sink
            knowledge_provider: Knowledge retrieval provider
            catalog: Prompt catalog
            clock: Optional time source shared by the stateful components
        """
        self.settings = settings or Settings()
        self._clock = clock or datetime.now

        # Initialize LLM clients
        self.llm_client = llm_client
        self.classifier_client = classifier_client or llm_client
        if llm_client is None:
            self._init_llm_clients()

        # Initialize state
        self.store = store or self._init_store()
        self.rate_limiter = RateLimiter(
            store=self.store,
            limit=self.settings.rate_limit,
            window=timedelta(seconds=self.settings.rate_limit_window_seconds),
            clock=self._clock
        )
        self.memory = ConversationMemory(
            store=self.store,
            max_turns=self.settings.memory_max_turns,
            clock=self._clock
        )

        # Initialize collaborators
        self.catalog = catalog or PromptCatalog.load(self.settings.prompts_path)
        self.channel = channel or self._init_channel()
        self.analytics_sink = analytics_sink or self._init_analytics()
        self.knowledge_provider = knowledge_provider or self._init_knowledge()

        # Initialize agents
        self.classifier = ClassifierAgent(self.classifier_client, self.catalog.classifier)
        self.dispatcher = AgentDispatcher(
            llm_client=self.llm_client,
            catalog=self.catalog,
            memory=self.memory,
            knowledge_provider=self.knowledge_provider,
            knowledge_top_k=self.settings.knowledge_top_k,
            clock=self._clock
        )
        self.notifier = EscalationNotifier(
            channel=self.channel,
            admin_recipient_id=self.settings.admin_subscriber_id,
            alert_template=self.catalog.admin_alert
        )

        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.background_workers,
            thread_name_prefix="dispatch-bg"
        )
        self._purge_interval = timedelta(minutes=self.settings.purge_interval_minutes)
        self._purge_guard = threading.Lock()
        self._next_purge_at = self._clock() + self._purge_interval

    def _init_llm_clients(self):
        """Initialize LLM clients based on settings."""
        try:
            agent_client, classifier_client = create_clients_from_settings(self.settings)
        except Exception as e:
            logger.error(f"Failed to initialize LLM clients: {e}")
            return
        self.llm_client = agent_client
        if self.classifier_client is None:
            self.classifier_client = classifier_client

    def _init_store(self) -> BaseStateStore:
        """Initialize the keyed state store."""
        if self.settings.storage_backend == "sqlite":
            logger.info(f"Using SQLite state store: {self.settings.db_path}")
            return SQLiteStateStore(
                db_path=self.settings.db_path,
                clock=self._clock,
                ttl=self.settings.state_ttl
            )
        if self.settings.storage_backend != "memory":
            raise ValueError(f"Unsupported storage backend: {self.settings.storage_backend}")
        return InMemoryStateStore(clock=self._clock, ttl=self.settings.state_ttl)

    def _init_channel(self) -> BaseChannel:
        if self.settings.manychat_token:
            return ManyChatChannel(
                token=self.settings.manychat_token,
                api_url=self.settings.manychat_api_url,
                timeout=self.settings.request_timeout_seconds
            )
        logger.warning("No MANYCHAT_TOKEN; replies go to the console channel")
        return ConsoleChannel()

    def _init_analytics(self) -> BaseAnalyticsSink:
        if self.settings.supabase_url and self.settings.supabase_key:
            return SupabaseAnalyticsSink(
                url=self.settings.supabase_url,
                api_key=self.settings.supabase_key,
                table=self.settings.analytics_table,
                timeout=self.settings.request_timeout_seconds
            )
        return LoggingAnalyticsSink()

    def _init_knowledge(self) -> BaseKnowledgeProvider:
        if self.settings.knowledge_api_url:
            return KnowledgeAPIProvider(
                base_url=self.settings.knowledge_api_url,
                timeout=self.settings.request_timeout_seconds
            )
        return LocalKnowledgeBase(knowledge_path=self.settings.knowledge_path)

    def process(self, inbound: Union[InboundMessage, dict]) -> PipelineResult:
        """
        Process one inbound message end-to-end.

        Args:
            inbound: InboundMessage or a raw webhook body

        Returns:
            PipelineResult for the caller

        Raises:
            InvalidInboundMessage: If subscriber id or text is empty
        """
        start = time.monotonic()

        if isinstance(inbound, dict):
            inbound = InboundMessage.from_webhook(inbound)
        inbound.validate_required()
        self._maybe_purge()

        subscriber_id = inbound.subscriber_id
        message = inbound.message_text
        name = inbound.display_name
        language = detect_language(message)
        warnings: list[str] = []

        logger.info(
            f"Inbound message from {subscriber_id} "
            f"(language={language.value}, length={len(message)})"
        )

        # Step 1: Admission
        try:
            admission = self.rate_limiter.check_and_admit(subscriber_id)
            allowed = admission.allowed
        except Exception as e:
            logger.error(f"Rate limiter unavailable, admitting {subscriber_id}: {e}")
            warnings.append(f"RateLimiterUnavailable: {e}")
            allowed = True

        if not allowed:
            notice = self.catalog.rate_limit_message(language)
            delivered = self._deliver(subscriber_id, notice, warnings)
            return PipelineResult(
                status=PipelineStatus.RATE_LIMITED,
                subscriber_id=subscriber_id,
                language=language,
                response_text=notice,
                delivered=delivered,
                warnings=warnings,
                duration_ms=self._elapsed_ms(start)
            )

        # Step 2: Classify and dispatch
        category: Optional[Category] = None
        try:
            classification = self.classifier.classify(message, language)
            category = classification.category
            if classification.degraded:
                warnings.append("ClassificationDegraded")
            response_text = self.dispatcher.dispatch(
                category, subscriber_id, name, message, language
            )
        except Exception as e:
            logger.exception(f"Processing failed for {subscriber_id}, using fallback")
            warnings.append(f"ProcessingFailed: {e}")
            category = category or Category.ESCALATION
            response_text = self.catalog.fallback_message(language)

        # Step 3: Escalation alert
        if category == Category.ESCALATION:
            self._submit_detached(
                "NotificationFailed",
                self.notifier.notify,
                subscriber_id, name, message, self._clock()
            )

        # Step 4: Delivery
        delivered = self._deliver(subscriber_id, response_text, warnings)

        duration_ms = self._elapsed_ms(start)

        # Step 5: Analytics
        record = AnalyticsRecord(
            subscriber_id=subscriber_id,
            display_name=name,
            category=category,
            sanitized_input=sanitize_text(message),
            sanitized_output=sanitize_text(response_text),
            escalated=category == Category.ESCALATION,
            duration_ms=duration_ms,
            language=language,
            created_at=self._clock()
        )
        self._submit_detached("AnalyticsFailed", self.analytics_sink.emit, record)

        logger.info(
            f"Processed message from {subscriber_id}: category={category.value}, "
            f"duration={duration_ms}ms"
        )

        return PipelineResult(
            status=PipelineStatus.SUCCESS,
            subscriber_id=subscriber_id,
            category=category,
            language=language,
            response_text=response_text,
            delivered=delivered,
            warnings=warnings,
            duration_ms=duration_ms
        )

    def _deliver(self, subscriber_id: str, text: str, warnings: list[str]) -> bool:
        """Send a reply; failures become warnings."""
        try:
            result = self.channel.send_message(subscriber_id, text)
        except Exception as e:
            logger.error(f"DeliveryFailed to {subscriber_id}: {e}")
            warnings.append(f"DeliveryFailed: {e}")
            return False

        if not result.success:
            warnings.append(f"DeliveryFailed: {result.error}")
        return result.success

    def _submit_detached(self, failure_name: str, fn: Callable, *args) -> Optional[Future]:
        """Run a side effect in the background; its failure is only logged."""
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError as e:
            logger.error(f"{failure_name}: could not schedule task: {e}")
            return None

        def _log_failure(done: Future):
            error = done.exception()
            if error is not None:
                logger.error(f"{failure_name}: {error}")

        future.add_done_callback(_log_failure)
        return future

    def _elapsed_ms(self, start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    def get_conversation_history(self, subscriber_id: str) -> list:
        """Get conversation history for display."""
        return [
            {"role": turn.role, "content": turn.content, "timestamp": turn.timestamp}
            for turn in self.memory.snapshot(subscriber_id)
        ]

    def _maybe_purge(self) -> None:
        """Schedule a background purge of idle state once per purge interval."""
        now = self._clock()
        with self._purge_guard:
            if now < self._next_purge_at:
                return
            self._next_purge_at = now + self._purge_interval
        self._submit_detached("PurgeFailed", self.purge_idle_state, self.settings.state_ttl)

    def purge_idle_state(self, max_idle: timedelta) -> int:
        """Expire subscribers with no activity within ``max_idle`` (never shorter than the rate-limit window)."""
        return self.store.purge_expired(max(max_idle, self.rate_limiter.window))

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background pool, optionally draining pending tasks."""
        self._executor.shutdown(wait=wait)


__all__ = ["DispatchOrchestrator", "InvalidInboundMessage"]
