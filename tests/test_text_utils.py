"""Tests for language detection, greetings, sanitizing and inbound parsing."""

import pytest
from datetime import datetime

from errors import InvalidInboundMessage
from schemas.context import Language
from schemas.inbound import InboundMessage, normalize_subscriber_id
from utils.language import detect_language, get_contextual_greeting
from utils.sanitize import sanitize_text


class TestDetectLanguage:
    """Test language detection."""

    @pytest.mark.parametrize("text,expected", [
        ("Hola, viajo a Europa 10 días, cuánto cuesta", Language.ES),
        ("¿Me llegó el QR?", Language.ES),
        ("How much does it cost for 10 days in Europe?", Language.EN),
        ("my eSIM is not working", Language.EN),
        ("Olá, quanto custa o plano para viagem?", Language.PT),
        ("Não recebi o código", Language.PT),
    ])
    def test_detects(self, text, expected):
        """Test common messages in each language."""
        assert detect_language(text) == expected

    def test_defaults_to_spanish(self):
        """Test that unknown or empty text resolves to Spanish."""
        assert detect_language("") == Language.ES
        assert detect_language(None) == Language.ES
        assert detect_language("12345 !!!") == Language.ES


class TestContextualGreeting:
    """Test time-of-day greetings."""

    @pytest.mark.parametrize("hour,expected", [
        (5, "Buenos días"),
        (11, "Buenos días"),
        (12, "Buenas tardes"),
        (18, "Buenas tardes"),
        (19, "Buenas noches"),
        (2, "Buenas noches"),
    ])
    def test_spanish_boundaries(self, hour, expected):
        """Test greeting boundaries."""
        assert get_contextual_greeting(Language.ES, datetime(2026, 3, 2, hour)) == expected

    def test_other_languages(self):
        """Test English and Portuguese greetings."""
        now = datetime(2026, 3, 2, 9)
        assert get_contextual_greeting(Language.EN, now) == "Good morning"
        assert get_contextual_greeting(Language.PT, now) == "Bom dia"


class TestSanitizeText:
    """Test text cleanup for analytics."""

    def test_collapses_whitespace_and_controls(self):
        """Test control character removal and whitespace collapse."""
        assert sanitize_text("  hola\x00\n\n  mundo\t ") == "hola mundo"

    def test_truncates(self):
        """Test the length cap."""
        result = sanitize_text("a" * 50, max_length=10)
        assert len(result) == 10
        assert result.endswith("...")

    def test_empty(self):
        """Test empty input."""
        assert sanitize_text(None) == ""
        assert sanitize_text("") == ""


class TestInboundMessage:
    """Test inbound normalization and validation."""

    def test_subscriber_prefix_stripped(self):
        """Test subscriber id normalization."""
        assert normalize_subscriber_id(" user:12345 ") == "12345"
        assert normalize_subscriber_id(12345) == "12345"
        assert normalize_subscriber_id(None) == ""

    def test_defaults(self):
        """Test default display name and text trimming."""
        message = InboundMessage(subscriber_id="u1", message_text="  hola  ", display_name=None)

        assert message.message_text == "hola"
        assert message.display_name == "viajero"

    def test_validate_required(self):
        """Test that missing fields are all reported."""
        message = InboundMessage(subscriber_id="", message_text="")

        with pytest.raises(InvalidInboundMessage) as exc_info:
            message.validate_required()

        assert "subscriber_id" in str(exc_info.value)
        assert "message_text" in str(exc_info.value)

    def test_from_webhook(self):
        """Test webhook field names."""
        message = InboundMessage.from_webhook({
            "subscriber_id": "user:987",
            "last_input_text": "hola",
            "first_name": "Ana",
            "phone": "+34600000000",
        })

        assert message.subscriber_id == "987"
        assert message.message_text == "hola"
        assert message.display_name == "Ana"
        assert message.phone == "+34600000000"

    def test_from_webhook_alternate_fields(self):
        """Test the key/text aliases."""
        message = InboundMessage.from_webhook({"key": "55", "text": "hi"})

        assert message.subscriber_id == "55"
        assert message.message_text == "hi"
        assert message.display_name == "viajero"
