"""
Парсеры ответов RCON сервера
"""
import re

# Коды форматирования Minecraft: §a, §l, §r и т.д.
SECTION_CODE_RE = re.compile(r'§[0-9a-fk-orx]', re.IGNORECASE)
COLOR_TAG_RE = re.compile(r'</?color(=[^>]*)?>', re.IGNORECASE)


def remove_color_codes(text: str) -> str:
    """
    Удаление кодов форматирования из ответа сервера

    Args:
        text: Исходный текст

    Returns:
        Текст без кодов § и тегов <color=...>
    """
    text = SECTION_CODE_RE.sub('', text)
    text = COLOR_TAG_RE.sub('', text)
    return text.strip()
