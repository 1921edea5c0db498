"""Agent dispatcher: selects behavior per category and generates the reply."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from errors import LLMError
from llm.base_client import BaseLLMClient, Message
from memory.conversation_memory import ConversationMemory
from retrieval.base_provider import BaseKnowledgeProvider
from schemas.context import AgentContext, Category, Language
from utils.language import get_contextual_greeting
from .profiles import PromptCatalog

logger = logging.getLogger(__name__)


class AgentDispatcher:
    """
    Runs the agent selected by the classifier.

    ESCALATION answers with a canned message and touches nothing else.
    Other categories retrieve knowledge, read memory, call the completion
    provider with the category's prompt and temperature, and store the
    exchange only when generation succeeded.
    """

    def __init__(
        self,
        llm_client: Optional[BaseLLMClient],
        catalog: PromptCatalog,
        memory: ConversationMemory,
        knowledge_provider: Optional[BaseKnowledgeProvider] = None,
        knowledge_top_k: int = 3,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize dispatcher.

        Args:
            llm_client: Completion provider for agent replies
            catalog: Prompt catalog (must cover every non-escalation category)
            memory: Conversation memory
            knowledge_provider: Optional knowledge retrieval provider
            knowledge_top_k: Snippets to include in the prompt
            clock: Optional time source for the contextual greeting
        """
        catalog.check_complete()
        self.llm_client = llm_client
        self.catalog = catalog
        self.memory = memory
        self.knowledge_provider = knowledge_provider
        self.knowledge_top_k = knowledge_top_k
        self._clock = clock or datetime.now

    def dispatch(
        self,
        category: Category,
        subscriber_id: str,
        display_name: str,
        message: str,
        language: Language
    ) -> str:
        """
        Produce the reply for one classified message.

        Args:
            category: Classified category
            subscriber_id: Normalized subscriber id
            display_name: Name used in the prompt
            message: Current user message
            language: Detected language

        Returns:
            Response text (the fallback message if generation failed)
        """
        logger.info(f"Running agent {category.value} for {subscriber_id}")

        if category == Category.ESCALATION:
            return self.catalog.escalation_message(language)

        profile = self.catalog.agent_for(category)
        context = self._build_context(subscriber_id, display_name, message, language)
        messages = self.build_messages(category, context)

        if not self.llm_client:
            return self._fallback(category, language, "no completion provider configured")

        try:
            text = self.llm_client.complete(
                messages,
                temperature=profile.temperature,
                max_tokens=profile.max_tokens
            )
        except LLMError as e:
            return self._fallback(category, language, str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure in agent {category.value}")
            return self._fallback(category, language, f"unexpected error: {e}")

        try:
            self.memory.append_exchange(subscriber_id, message, text)
        except Exception as e:
            logger.error(f"Memory update failed for {subscriber_id}, reply kept: {e}")

        logger.info(f"Agent {category.value} responded ({len(text)} chars)")
        return text

    def build_messages(self, category: Category, context: AgentContext) -> List[Message]:
        """System instruction, then history, then the current message."""
        system_prompt = self.catalog.agent_for(category).render(context)
        return [
            Message(role="system", content=system_prompt),
            *context.history,
            Message(role="user", content=context.message),
        ]

    def _build_context(
        self,
        subscriber_id: str,
        display_name: str,
        message: str,
        language: Language
    ) -> AgentContext:
        return AgentContext(
            language=language,
            display_name=display_name,
            subscriber_id=subscriber_id,
            greeting=get_contextual_greeting(language, self._clock()),
            knowledge=self._retrieve_knowledge(message),
            history=self.memory.get_context_messages(subscriber_id),
            message=message,
        )

    def _retrieve_knowledge(self, message: str) -> str:
        """Knowledge block for the prompt; empty when retrieval fails."""
        if not self.knowledge_provider:
            return ""
        try:
            snippets = self.knowledge_provider.search(message, top_k=self.knowledge_top_k)
        except Exception as e:
            logger.warning(f"Knowledge retrieval failed, continuing without it: {e}")
            return ""
        return self.knowledge_provider.format_context(snippets)

    def _fallback(self, category: Category, language: Language, reason: str) -> str:
        logger.error(f"GenerationFailed in agent {category.value}: {reason}")
        return self.catalog.fallback_message(language)
