"""
Conversation helpers.

A conversation is the OpenAI-style list of message dicts:
    {"role": "system" | "user" | "assistant", "content": str | list[part]}
where a multi-part content list mixes {"type": "text", "text": ...} parts and
image parts ({"type": "image_url", "image_url": {"url": ...}}).
"""

from typing import Any

Message = dict[str, Any]
Conversation = list[Message]

IMAGE_PART_TYPES = frozenset({"image_url", "image"})
PREVIEW_MAX_CHARS = 300
UNKNOWN_PREVIEW = "???"


def is_image_part(part: Any) -> bool:
    return isinstance(part, dict) and part.get("type") in IMAGE_PART_TYPES


def has_image_content(conversation: Conversation) -> bool:
    """True if any message carries multi-part content with an image reference."""
    for message in conversation:
        content = message.get("content")
        if isinstance(content, list) and any(is_image_part(part) for part in content):
            return True
    return False


def with_system_message(conversation: Conversation, system_content: str) -> Conversation:
    """Prepend a system message; an empty system content leaves the conversation as is."""
    if not system_content:
        return list(conversation)
    return [{"role": "system", "content": system_content}, *conversation]


def last_user_preview(conversation: Conversation, limit: int = PREVIEW_MAX_CHARS) -> str:
    """
    Preview of the most recent user message for the activity log.

    Only plain-string content is previewed; multi-part content yields "???".
    """
    for message in reversed(conversation):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, str):
            return content[:limit]
        return UNKNOWN_PREVIEW
    return UNKNOWN_PREVIEW
