"""
Команды бота
"""
from .rcon import setup as setup_rcon

__all__ = ['setup_rcon']
