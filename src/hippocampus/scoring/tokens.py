"""Token estimation.

A fixed ratio of four characters per token, rounded up.  No tokenizer is
consulted.
"""
from __future__ import annotations

import math

from hippocampus.messages.content import Message, extract_text, serialize_content

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Return ``ceil(len(text) / 4)``; 0 for empty text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_message_tokens(message: Message) -> int:
    """Estimate tokens for a message.

    Uses the extracted text when there is any; otherwise the JSON
    serialisation of the raw content, so blank or malformed messages still
    cost something.
    """
    text = extract_text(message)
    if text:
        return estimate_tokens(text)
    return estimate_tokens(serialize_content(message))
