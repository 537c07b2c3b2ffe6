"""
Уведомления о состоянии RCON в Discord
Одно сообщение в канале уведомлений, которое редактируется при каждом изменении
статуса, и статус активности бота
"""
import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional

import discord
from discord.ext import commands

from rcon_bridge.rcon.status import ConnectionState, ConnectionStatus
from rcon_bridge.utils.embeds import create_error_embed, create_status_embed
from rcon_bridge.utils.permissions import has_rcon_access

logger = logging.getLogger(__name__)

ACTIVITY_TYPES = {
    'watching': discord.ActivityType.watching,
    'playing': discord.ActivityType.playing,
    'streaming': discord.ActivityType.streaming,
    'listening': discord.ActivityType.listening,
    'competing': discord.ActivityType.competing
}


class ReconnectView(discord.ui.View):
    """Кнопка ручного переподключения под уведомлением об ошибке"""

    def __init__(self, reconnect: Callable[[], Awaitable[None]], allowed_roles: Iterable[str] = ()):
        super().__init__(timeout=None)
        self.reconnect = reconnect
        self.allowed_roles = list(allowed_roles)

    @discord.ui.button(label="Переподключить", style=discord.ButtonStyle.primary, emoji="🔄")
    async def reconnect_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        if not has_rcon_access(interaction.user, self.allowed_roles):
            await interaction.response.send_message(
                embed=create_error_embed("Ошибка", "Недостаточно прав для переподключения RCON"),
                ephemeral=True
            )
            return

        logger.info(f"Переподключение RCON по кнопке от {interaction.user}")
        await interaction.response.defer()
        await self.reconnect()


class DiscordStatusSink:
    """
    StatusSink поверх Discord

    update() ничего не ждет: запоминает последний статус и будит задачу
    отрисовки. Если за время отрисовки пришло несколько статусов, показывается
    только последний.
    """

    def __init__(
        self,
        bot: commands.Bot,
        channel_id: int,
        address: Optional[str] = None,
        allowed_roles: Iterable[str] = (),
        activity_name: str = "RCON",
        activity_type: str = "watching"
    ):
        self.bot = bot
        self.channel_id = channel_id
        self.address = address
        self.allowed_roles = list(allowed_roles)
        self.activity_name = activity_name
        self.activity_type = ACTIVITY_TYPES.get(activity_type, discord.ActivityType.watching)

        self.message: Optional[discord.Message] = None
        self.latest: Optional[ConnectionStatus] = None
        self._dirty = False
        self._task: Optional[asyncio.Task] = None

    def update(self, status: ConnectionStatus):
        self.latest = status
        self._dirty = True
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._render_loop())

    async def _render_loop(self):
        while self._dirty:
            self._dirty = False
            status = self.latest
            try:
                await self.render(status)
            except Exception as e:
                logger.error(f"Не удалось обновить уведомление RCON: {e}", exc_info=True)

    async def render(self, status: ConnectionStatus):
        await self._update_presence(status)

        channel = await self._get_channel()
        if channel is None:
            return

        embed = create_status_embed(status, self.address)
        view = None
        if status.state is ConnectionState.FAILED and status.reconnect is not None:
            view = ReconnectView(status.reconnect, self.allowed_roles)

        if self.message is not None:
            try:
                await self.message.edit(embed=embed, view=view)
                return
            except discord.NotFound:
                logger.debug("Сообщение уведомления удалено, отправляем новое")

        self.message = await channel.send(embed=embed, view=view)

    async def _get_channel(self):
        if not self.channel_id:
            return None

        channel = self.bot.get_channel(self.channel_id)
        if channel is not None:
            return channel

        try:
            return await self.bot.fetch_channel(self.channel_id)
        except (discord.NotFound, discord.Forbidden) as e:
            logger.warning(f"Канал уведомлений {self.channel_id} недоступен: {e}")
            return None

    async def _update_presence(self, status: ConnectionStatus):
        if status.state is ConnectionState.DISPOSED:
            return

        online = status.state is ConnectionState.CONNECTED
        try:
            await self.bot.change_presence(
                activity=discord.Activity(
                    type=self.activity_type,
                    name=self.activity_name if online else f"{self.activity_name} (не подключен)"
                ),
                status=discord.Status.online if online else discord.Status.idle
            )
        except Exception as e:
            # До подключения к Discord gateway статус сменить нельзя
            logger.warning(f"Не удалось обновить статус бота: {e}")

    async def close(self, timeout: float = 5.0):
        """Дожидается отрисовки последнего статуса, по таймауту отменяет ее"""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        try:
            await asyncio.wait_for(task, timeout)
        except asyncio.TimeoutError:
            logger.warning("Уведомление RCON не обновлено до завершения работы")
