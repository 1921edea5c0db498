"""Tests for LLM client wrappers and settings."""

import pytest
from types import SimpleNamespace
from unittest.mock import Mock, patch

from config.settings import Settings
from errors import LLMError
from fakes import FakeLLMClient
from llm.anthropic_client import AnthropicClient
from llm.base_client import Message
from llm.factory import LLMProvider, create_clients_from_settings, create_llm_client
from llm.openai_client import OpenAIClient


MESSAGES = [
    Message(role="system", content="Clasifica"),
    Message(role="user", content="hola"),
]


class TestOpenAIClient:
    """Test the OpenAI wrapper."""

    @patch('openai.OpenAI')
    def test_chat(self, mock_openai):
        """Test request parameters and response mapping."""
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="VENTAS"), finish_reason="stop")],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=1, total_tokens=11),
        )
        mock_openai.return_value.chat.completions.create.return_value = completion

        client = OpenAIClient(api_key="sk-test", model="gpt-4o-mini", timeout=7)
        response = client.chat(MESSAGES, temperature=0.1, max_tokens=50)

        assert response.content == "VENTAS"
        assert response.usage["total_tokens"] == 11
        mock_openai.assert_called_once_with(api_key="sk-test", timeout=7, max_retries=0)
        kwargs = mock_openai.return_value.chat.completions.create.call_args[1]
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 50
        assert kwargs["messages"][0] == {"role": "system", "content": "Clasifica"}

    @patch('openai.OpenAI')
    def test_provider_error_wrapped(self, mock_openai):
        """Test that SDK errors surface as LLMError."""
        mock_openai.return_value.chat.completions.create.side_effect = TimeoutError("timed out")

        client = OpenAIClient(api_key="sk-test")

        with pytest.raises(LLMError):
            client.chat(MESSAGES)

    def test_no_key(self, monkeypatch):
        """Test that a client without a key refuses to chat."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        client = OpenAIClient()

        with pytest.raises(LLMError):
            client.chat(MESSAGES)


class TestAnthropicClient:
    """Test the Anthropic wrapper."""

    @patch('anthropic.Anthropic')
    def test_chat_splits_system(self, mock_anthropic):
        """Test that the system message moves to the system parameter."""
        response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text="SOPORTE")],
            usage=SimpleNamespace(input_tokens=10, output_tokens=2),
            stop_reason="end_turn",
        )
        mock_anthropic.return_value.messages.create.return_value = response

        client = AnthropicClient(api_key="sk-ant-test", timeout=5)
        result = client.chat(MESSAGES, temperature=0.1, max_tokens=50)

        assert result.content == "SOPORTE"
        assert result.usage["total_tokens"] == 12
        kwargs = mock_anthropic.return_value.messages.create.call_args[1]
        assert kwargs["system"] == "Clasifica"
        assert kwargs["messages"] == [{"role": "user", "content": "hola"}]
        assert kwargs["temperature"] == 0.1


class TestFactoryAndSettings:
    """Test client construction from settings."""

    @patch('openai.OpenAI', Mock())
    def test_create_openai(self):
        """Test the factory for OpenAI."""
        client = create_llm_client(LLMProvider.OPENAI, api_key="sk-test", model="gpt-4o-mini")
        assert isinstance(client, OpenAIClient)
        assert client.get_model_name() == "gpt-4o-mini"

    @patch('anthropic.Anthropic', Mock())
    def test_create_anthropic(self):
        """Test the factory for Anthropic."""
        client = create_llm_client(LLMProvider.ANTHROPIC, api_key="sk-ant-test")
        assert isinstance(client, AnthropicClient)

    def test_classifier_model_defaults_small(self, monkeypatch):
        """Test the cheaper default model for classification."""
        monkeypatch.delenv("LLM_MODEL_CLASSIFIER", raising=False)

        assert Settings(llm_provider="openai").get_classifier_model() == "gpt-4o-mini"
        assert Settings(llm_provider="anthropic").get_classifier_model() == "claude-3-5-haiku-latest"
        assert Settings(classifier_model="custom").get_classifier_model() == "custom"

    def test_env_loading(self, monkeypatch):
        """Test that secrets come from the environment when not passed."""
        monkeypatch.setenv("MANYCHAT_TOKEN", "mc-env")
        monkeypatch.setenv("ADMIN_SUBSCRIBER_ID", "admin-env")

        settings = Settings(admin_subscriber_id="admin-arg")

        assert settings.manychat_token == "mc-env"
        assert settings.admin_subscriber_id == "admin-arg"
        assert settings.rate_limit_window_seconds == 24 * 3600

    def test_clients_from_settings(self, monkeypatch):
        """Test that agents and classifier get separate models."""
        monkeypatch.delenv("LLM_MODEL_CLASSIFIER", raising=False)
        with patch('openai.OpenAI'):
            agent, classifier = create_clients_from_settings(
                Settings(llm_provider="openai", openai_api_key="sk-test", agent_model="gpt-4o")
            )

        assert agent.get_model_name() == "gpt-4o"
        assert classifier.get_model_name() == "gpt-4o-mini"

    def test_clients_from_settings_without_key(self, monkeypatch):
        """Test that a missing key yields no clients."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        assert create_clients_from_settings(Settings(llm_provider="anthropic")) == (None, None)


class TestComplete:
    """Test the text completion helper on the base client."""

    def test_strips_text(self):
        """Test whitespace trimming."""
        assert FakeLLMClient("  VENTAS\n").complete(MESSAGES) == "VENTAS"

    def test_empty_raises(self):
        """Test that an empty completion is a provider failure."""
        with pytest.raises(LLMError):
            FakeLLMClient(" ").complete(MESSAGES)
