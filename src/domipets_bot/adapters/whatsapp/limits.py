"""Limites da API Meta/WhatsApp para mensagens interativas."""

MAX_TEXT_LENGTH = 4096
MAX_INTERACTIVE_BODY_LENGTH = 1024
MAX_BUTTON_TEXT_LENGTH = 20
MAX_BUTTONS_PER_MESSAGE = 3
MAX_LIST_ROWS = 10
MAX_LIST_SECTIONS = 10
MAX_LIST_ROW_TITLE_LENGTH = 24
MAX_LIST_ROW_DESCRIPTION_LENGTH = 72
MAX_LIST_SECTION_TITLE_LENGTH = 24
MAX_LIST_BUTTON_LABEL_LENGTH = 20
MAX_REPLY_ID_LENGTH = 200


def truncate(value: str, limit: int) -> str:
    """Corta no limite da Meta, marcando com reticências quando cabe."""
    if len(value) <= limit:
        return value
    if limit <= 1:
        return value[:limit]
    return value[: limit - 1] + "…"
