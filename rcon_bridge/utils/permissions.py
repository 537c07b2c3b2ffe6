"""
Проверка прав на RCON команды
"""
from typing import Iterable


def has_rcon_access(member, allowed_roles: Iterable[str]) -> bool:
    """
    Администраторы сервера и участники с одной из разрешенных ролей

    Вне сервера (личные сообщения) доступа нет.
    """
    permissions = getattr(member, 'guild_permissions', None)
    if permissions is None:
        return False
    if permissions.administrator:
        return True

    allowed = set(allowed_roles)
    return any(role.name in allowed for role in getattr(member, 'roles', []))
