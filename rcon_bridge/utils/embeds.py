"""
Шаблоны Embed-сообщений для Discord
"""
from typing import Optional

import discord

from rcon_bridge.rcon.status import ConnectionState, ConnectionStatus

STATUS_COLORS = {
    ConnectionState.CONNECTING: discord.Color.orange(),
    ConnectionState.CONNECTED: discord.Color.green(),
    ConnectionState.RECONNECTING: discord.Color.orange(),
    ConnectionState.FAILED: discord.Color.red(),
    ConnectionState.DISPOSED: discord.Color.light_grey(),
}

STATUS_TITLES = {
    ConnectionState.CONNECTING: "🔄 RCON: подключение",
    ConnectionState.CONNECTED: "✅ RCON подключен",
    ConnectionState.RECONNECTING: "🔄 RCON: переподключение",
    ConnectionState.FAILED: "❌ RCON не подключен",
    ConnectionState.DISPOSED: "RCON отключен",
}


def create_status_embed(
    status: ConnectionStatus,
    address: Optional[str] = None
) -> discord.Embed:
    """Embed уведомления о состоянии RCON подключения"""
    embed = discord.Embed(
        title=STATUS_TITLES[status.state],
        description=status.describe(),
        color=STATUS_COLORS[status.state],
        timestamp=discord.utils.utcnow()
    )

    if address:
        embed.add_field(name="Сервер", value=f"`{address}`", inline=True)

    if status.state is ConnectionState.FAILED:
        embed.add_field(
            name="Действия",
            value="Нажмите «Переподключить» или используйте команду `rcon_reconnect`",
            inline=False
        )

    return embed


def create_error_embed(
    title: str,
    description: str
) -> discord.Embed:
    """Embed для ошибок"""
    embed = discord.Embed(
        title=f"{title}",
        description=description,
        color=discord.Color.red(),
        timestamp=discord.utils.utcnow()
    )
    return embed

