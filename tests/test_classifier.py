"""Tests for the Classifier."""

import pytest

from agents.classifier import ClassifierAgent, normalize_label
from agents.profiles import PromptCatalog
from fakes import FakeLLMClient, timeout_error
from schemas.context import Category, Language


class TestNormalizeLabel:
    """Test label cleanup."""

    @pytest.mark.parametrize("raw,expected", [
        ("VENTAS", "VENTAS"),
        ("  soporte\n", "SOPORTE"),
        ("Técnico.", "TECNICO"),
        ("**ESCALAMIENTO**", "ESCALAMIENTO"),
    ])
    def test_normalize(self, raw, expected):
        """Test case, accent and punctuation folding."""
        assert normalize_label(raw) == expected


class TestClassifierAgent:
    """Test message classification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.profile = PromptCatalog.load().classifier

    def _classify(self, reply, message="hola"):
        client = FakeLLMClient(reply)
        agent = ClassifierAgent(client, self.profile)
        return agent.classify(message, Language.ES), client

    @pytest.mark.parametrize("reply,expected", [
        ("VENTAS", Category.SALES),
        ("SOPORTE", Category.SUPPORT),
        ("TECNICO", Category.TECHNICAL),
        ("ESCALAMIENTO", Category.ESCALATION),
        ("technical", Category.TECHNICAL),
        ("Técnico", Category.TECHNICAL),
    ])
    def test_known_labels(self, reply, expected):
        """Test that provider labels map to categories."""
        result, _ = self._classify(reply)
        assert result.category == expected
        assert result.degraded is False
        assert result.raw_label == reply

    def test_unknown_label_escalates(self):
        """Test that out-of-set output resolves to ESCALATION."""
        result, _ = self._classify("BILLING")
        assert result.category == Category.ESCALATION
        assert result.degraded is True
        assert result.raw_label == "BILLING"

    def test_empty_output_escalates(self):
        """Test that an empty completion resolves to ESCALATION."""
        result, _ = self._classify("   ")
        assert result.category == Category.ESCALATION
        assert result.degraded is True

    def test_timeout_escalates(self):
        """Test that a provider timeout resolves to ESCALATION."""
        result, client = self._classify(timeout_error())
        assert result.category == Category.ESCALATION
        assert result.degraded is True
        assert len(client.calls) == 1

    def test_unexpected_exception_escalates(self):
        """Test that any provider exception is contained."""
        result, _ = self._classify(RuntimeError("socket closed"))
        assert result.category == Category.ESCALATION
        assert result.degraded is True

    def test_no_client_escalates(self):
        """Test classification without a provider."""
        agent = ClassifierAgent(None, self.profile)
        result = agent.classify("hola")
        assert result.category == Category.ESCALATION
        assert result.degraded is True

    def test_call_parameters(self):
        """Test the instruction, temperature and token cap sent to the provider."""
        _, client = self._classify("VENTAS", message="cuanto cuesta europa")

        call = client.calls[0]
        assert call["temperature"] == 0.1
        assert call["max_tokens"] == 50
        assert call["messages"][0].role == "system"
        assert "ESCALAMIENTO" in call["messages"][0].content
        assert call["messages"][-1].content == "cuanto cuesta europa"
