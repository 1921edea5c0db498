"""Language detection and localized greetings."""

import re
from datetime import datetime
from typing import Optional

from schemas.context import Language, DEFAULT_LANGUAGE

_WORD_RE = re.compile(r"[a-zà-ÿ']+")

LANGUAGE_MARKERS = {
    Language.ES: {
        "hola", "cuanto", "cuánto", "cuesta", "quiero", "necesito", "gracias",
        "por", "favor", "dias", "días", "como", "cómo", "donde", "dónde",
        "el", "la", "los", "las", "es", "mi", "tengo", "llegó", "llego",
        "buenas", "buenos", "que", "qué", "viaje", "viajo", "precio",
    },
    Language.EN: {
        "hello", "hi", "hey", "how", "much", "what", "where", "the", "is",
        "my", "i", "need", "want", "does", "do", "thanks", "thank", "you",
        "price", "days", "trip", "travel", "can", "it", "work", "not",
    },
    Language.PT: {
        "olá", "ola", "obrigado", "obrigada", "você", "voce", "quanto",
        "custa", "preciso", "não", "nao", "meu", "minha", "dias", "viagem",
        "como", "onde", "chegou", "bom", "boa", "tudo", "bem", "quero",
    },
}

# Characters that settle the question on their own
LANGUAGE_CHARACTERS = {
    Language.ES: set("ñ¿¡"),
    Language.PT: set("ãõç"),
}


def detect_language(text: Optional[str]) -> Language:
    """
    Guess the language of a message.

    Scores marker words and characters for each supported language and
    falls back to Spanish when nothing stands out.

    Args:
        text: Message text

    Returns:
        One of the supported Language values
    """
    if not text:
        return DEFAULT_LANGUAGE

    lowered = text.lower()
    scores = {language: 0 for language in Language}

    for language, chars in LANGUAGE_CHARACTERS.items():
        if any(ch in lowered for ch in chars):
            scores[language] += 3

    for word in _WORD_RE.findall(lowered):
        for language, markers in LANGUAGE_MARKERS.items():
            if word in markers:
                scores[language] += 1

    best = max(scores.values())
    if best == 0:
        return DEFAULT_LANGUAGE

    # Ties resolve to the default language first, then enum order
    if scores[DEFAULT_LANGUAGE] == best:
        return DEFAULT_LANGUAGE
    return next(language for language in Language if scores[language] == best)


GREETINGS = {
    Language.ES: ("Buenos días", "Buenas tardes", "Buenas noches"),
    Language.EN: ("Good morning", "Good afternoon", "Good evening"),
    Language.PT: ("Bom dia", "Boa tarde", "Boa noite"),
}


def get_contextual_greeting(language: Language, now: Optional[datetime] = None) -> str:
    """Time-of-day greeting in the given language."""
    hour = (now or datetime.now()).hour
    morning, afternoon, evening = GREETINGS.get(language, GREETINGS[DEFAULT_LANGUAGE])
    if 5 <= hour < 12:
        return morning
    if 12 <= hour < 19:
        return afternoon
    return evening
