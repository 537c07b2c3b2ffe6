"""
Discord-бот для выполнения RCON команд на игровом сервере
"""
__version__ = "0.1.0"
