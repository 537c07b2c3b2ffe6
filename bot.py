"""
Запуск бота из корня репозитория: python bot.py
"""
from rcon_bridge.bot import main

if __name__ == "__main__":
    main()
