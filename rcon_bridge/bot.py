"""
Главный файл Discord-бота для выполнения RCON команд на игровом сервере
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import discord
from discord.ext import commands

from rcon_bridge.config import (
    DISCORD_TOKEN,
    COMMAND_PREFIX,
    NOTIFY_CHANNEL,
    RCON_ALLOWED_ROLES,
    LOG_FILE,
    LOG_LEVEL,
    BOT_ACTIVITY_NAME,
    BOT_ACTIVITY_TYPE,
    load_connection_config
)
from rcon_bridge.commands import setup_rcon
from rcon_bridge.rcon import ConnectionSupervisor, SourceRCONConnection
from rcon_bridge.utils.notifier import DiscordStatusSink

logger = logging.getLogger(__name__)


def setup_logging():
    """Настройка логирования в файл и консоль"""
    log_file_path = LOG_FILE or 'logs/bot.log'
    log_level_str = LOG_LEVEL or 'INFO'

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, str(log_level_str).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file_path, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )

    # Уменьшаем уровень логирования для discord и rcon библиотек
    logging.getLogger('discord').setLevel(logging.INFO)
    logging.getLogger('rcon').setLevel(logging.INFO)


# Создание бота с необходимыми intents
intents = discord.Intents.default()
intents.message_content = True

bot = commands.Bot(command_prefix=COMMAND_PREFIX, intents=intents)

# Глобальные объекты
supervisor: Optional[ConnectionSupervisor] = None
status_sink: Optional[DiscordStatusSink] = None


@bot.event
async def on_ready():
    """Событие при запуске бота"""
    global supervisor, status_sink

    if bot.user:
        logger.info(f'{bot.user} успешно запущен!')
    logger.info(f'Бот подключен к {len(bot.guilds)} серверам')

    # on_ready повторяется после переподключения к Discord
    if supervisor is not None:
        return

    config = load_connection_config()
    status_sink = DiscordStatusSink(
        bot,
        NOTIFY_CHANNEL,
        address=f"{config.host}:{config.port}",
        allowed_roles=RCON_ALLOWED_ROLES,
        activity_name=BOT_ACTIVITY_NAME,
        activity_type=BOT_ACTIVITY_TYPE
    )

    logger.info("Инициализация RCON подключения...")
    supervisor = ConnectionSupervisor(SourceRCONConnection(config), config, status_sink)
    await supervisor.start()

    logger.info("Загрузка команд...")
    await setup_rcon(bot, supervisor, RCON_ALLOWED_ROLES)
    logger.info("✓ Команды загружены")

    logger.info("Бот полностью готов к работе!")


@bot.event
async def on_command_error(ctx, error):
    """Обработка ошибок команд"""
    if isinstance(error, commands.CommandNotFound):
        return
    elif isinstance(error, commands.MissingRequiredArgument):
        await ctx.send(f"❌ Отсутствует обязательный аргумент: {error.param.name}\n"
                       f"Пример: `{COMMAND_PREFIX}rcon time set day`")
    elif isinstance(error, commands.CheckFailure):
        await ctx.send(f"❌ {error}")
    elif isinstance(error, commands.BadArgument):
        await ctx.send(f"❌ Неверный аргумент: {error}")
    else:
        logger.error(f"Ошибка в команде {ctx.command}: {error}", exc_info=error)
        await ctx.send(f"❌ Произошла ошибка при выполнении команды: {error}")


async def cleanup():
    """Очистка ресурсов при завершении"""
    logger.info("Завершение работы бота...")

    if supervisor:
        await supervisor.dispose()

    if status_sink:
        await status_sink.close()

    logger.info("Бот завершил работу")


async def run_bot():
    async with bot:
        try:
            await bot.start(DISCORD_TOKEN)
        finally:
            await cleanup()


def main():
    """Главная функция запуска бота"""
    setup_logging()

    if not DISCORD_TOKEN:
        logger.error("=" * 60)
        logger.error("ОШИБКА: DISCORD_TOKEN не найден!")
        logger.error("=" * 60)
        logger.error("Создайте файл config.yaml или .env и заполните его.")
        logger.error("")
        logger.error("Минимальная конфигурация:")
        logger.error("DISCORD_TOKEN: \"ваш_токен_дискорд_бота\"")
        logger.error("RCON_HOST: \"ip_вашего_сервера\"")
        logger.error("RCON_PORT: 25575")
        logger.error("RCON_PASS: \"ваш_rcon_пароль\"")
        logger.error("NOTIFY_CHANNEL: id_канала_для_уведомлений")
        logger.error("=" * 60)
        return

    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        logger.info("Получен сигнал прерывания")


if __name__ == "__main__":
    main()
