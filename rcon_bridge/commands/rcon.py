"""
Команды для работы с RCON
"""
import logging
from typing import Iterable

from discord.ext import commands

from rcon_bridge.rcon.supervisor import NO_OUTPUT, CommandError, ConnectionSupervisor
from rcon_bridge.utils.embeds import create_error_embed, create_status_embed
from rcon_bridge.utils.message_utils import send_code_blocks
from rcon_bridge.utils.parsers import remove_color_codes
from rcon_bridge.utils.permissions import has_rcon_access

logger = logging.getLogger(__name__)


class RconCommands(commands.Cog):
    """Команды для отправки RCON команд и управления подключением"""

    def __init__(self, bot: commands.Bot, supervisor: ConnectionSupervisor, allowed_roles: Iterable[str] = ()):
        self.bot = bot
        self.supervisor = supervisor
        self.allowed_roles = list(allowed_roles)

    @property
    def address(self) -> str:
        return f"{self.supervisor.config.host}:{self.supervisor.config.port}"

    async def cog_check(self, ctx: commands.Context) -> bool:
        if has_rcon_access(ctx.author, self.allowed_roles):
            return True
        raise commands.CheckFailure("Недостаточно прав для RCON команд")

    @commands.command(
        name='rcon',
        usage='<команда>',
        help='Выполнить RCON команду на сервере. Пример: rcon time set day'
    )
    async def rcon_command(self, ctx: commands.Context, *, command: str):
        logger.info(f"Запрос на выполнение RCON команды от {ctx.author}: {command}")

        try:
            reply = await self.supervisor.send_command(command)
        except CommandError as e:
            logger.warning(f"RCON команда '{command}' не выполнена: {e}")
            await ctx.send(embed=create_error_embed(
                "Ошибка выполнения RCON команды",
                f"Команда: `{command}`\n{e.message}"
            ))
            return

        text = remove_color_codes(reply) if reply is not NO_OUTPUT else ""
        if not text:
            await ctx.send("✅ Команда выполнена, вывода нет")
            return

        await send_code_blocks(ctx, text)

    @commands.command(name='rcon_reconnect', help='Переподключиться к RCON серверу')
    async def rcon_reconnect(self, ctx: commands.Context):
        logger.info(f"Запрос на переподключение к RCON от {ctx.author}")
        await ctx.send("🔄 Попытка переподключения к RCON серверу...")

        await self.supervisor.manual_reconnect()
        await ctx.send(embed=create_status_embed(self.supervisor.status, self.address))

    @commands.command(name='rcon_status', help='Состояние RCON подключения')
    async def rcon_status(self, ctx: commands.Context):
        await ctx.send(embed=create_status_embed(self.supervisor.status, self.address))


async def setup(bot: commands.Bot, supervisor: ConnectionSupervisor, allowed_roles: Iterable[str] = ()):
    """Добавление команд в бота"""
    await bot.add_cog(RconCommands(bot, supervisor, allowed_roles))
