"""
Утилиты для работы с сообщениями Discord
"""
import logging
from typing import List

from discord.ext import commands

logger = logging.getLogger(__name__)

# Лимит Discord 2000 символов, с запасом на обрамление ```
MESSAGE_CHUNK_SIZE = 1950


def split_output(text: str, limit: int = MESSAGE_CHUNK_SIZE) -> List[str]:
    """
    Разбивает вывод команды на части не длиннее limit

    Режет по переводам строк, слишком длинные строки режутся как есть.
    """
    if limit <= 0:
        raise ValueError("limit должен быть положительным")

    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line

    if current:
        chunks.append(current)
    return [chunk.rstrip("\n") or " " for chunk in chunks]


async def send_code_blocks(ctx: commands.Context, text: str):
    """Отправляет текст в виде одного или нескольких блоков кода"""
    # Обратные кавычки в выводе сломают разметку блока
    safe_text = text.replace("```", "'''")
    chunks = split_output(safe_text)
    logger.debug(f"Отправка вывода ({len(text)} символов) частями: {len(chunks)}")
    for chunk in chunks:
        await ctx.send(f"```\n{chunk}\n```")
