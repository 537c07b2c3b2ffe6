"""
Конфигурация бота
Поддерживает загрузку из YAML файла (config.yaml) или переменных окружения (.env)
Приоритет: YAML файл > переменные окружения > значения по умолчанию
"""
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from rcon_bridge.rcon.connection import (
    DEFAULT_HOST,
    DEFAULT_MAX_RETRY,
    DEFAULT_PORT,
    DEFAULT_RETRY_INTERVAL,
    ConnectionConfig,
)

# Загружаем переменные окружения на случай, если YAML не используется
load_dotenv()

# Путь к файлу конфигурации
CONFIG_FILE = Path(os.getenv('RCON_BRIDGE_CONFIG', 'config.yaml'))


def load_config_data(path: Path) -> Dict[str, Any]:
    """Чтение YAML конфигурации, пустой словарь если файла нет или он битый"""
    if not path.exists():
        print(f"ℹ️ Файл {path} не найден, используются переменные окружения или значения по умолчанию")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"⚠️ Предупреждение: Не удалось загрузить {path}: {e}")
        return {}

    if not isinstance(data, dict):
        print(f"⚠️ Предупреждение: {path} должен содержать словарь, файл пропущен")
        return {}

    if data:
        print(f"✓ Загружена конфигурация из {path}")
    return data


CONFIG_DATA = load_config_data(CONFIG_FILE)


def get_config(key: str, default=None, env_key: Optional[str] = None):
    """
    Получить значение конфигурации
    Приоритет: YAML > переменные окружения > значение по умолчанию
    """
    # Пробуем YAML
    if key in CONFIG_DATA:
        value = CONFIG_DATA[key]
        if value is not None:
            return value

    # Пробуем переменные окружения
    env_key_to_use = env_key if env_key is not None else key
    env_value = os.getenv(env_key_to_use)
    if env_value is not None:
        return env_value

    # Возвращаем значение по умолчанию
    return default


def get_int(key: str, default: int) -> int:
    value = get_config(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} должен быть целым числом, получено: {value!r}")


def get_float(key: str, default: float) -> float:
    value = get_config(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} должен быть числом, получено: {value!r}")


def get_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Список из YAML или строки через запятую из окружения"""
    value = get_config(key, None)
    if value is None:
        return list(default or [])
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(',') if item.strip()]


def load_connection_config() -> ConnectionConfig:
    """Параметры RCON подключения"""
    return ConnectionConfig(
        host=str(get_config('RCON_HOST', DEFAULT_HOST) or DEFAULT_HOST),
        port=get_int('RCON_PORT', DEFAULT_PORT),
        password=str(get_config('RCON_PASS', '') or ''),
        max_retry=get_int('RCON_MAX_RETRY', DEFAULT_MAX_RETRY),
        retry_interval=get_int('RCON_RETRY_INTERVAL', DEFAULT_RETRY_INTERVAL),
        timeout=get_float('RCON_TIMEOUT', 10.0),
        keepalive_interval=get_float('RCON_KEEPALIVE_INTERVAL', 30.0),
        keepalive_command=str(get_config('RCON_KEEPALIVE_COMMAND', 'list')),
    )


# Discord
DISCORD_TOKEN = get_config('DISCORD_TOKEN', '') or ''
COMMAND_PREFIX = get_config('COMMAND_PREFIX', '!') or '!'

# Канал для уведомлений о состоянии RCON (0 = не отправлять)
NOTIFY_CHANNEL = get_int('NOTIFY_CHANNEL', 0)

# Роли, которым разрешены RCON команды (пусто = только администраторы)
RCON_ALLOWED_ROLES = get_list('RCON_ALLOWED_ROLES')

# Настройки логирования
LOG_FILE = get_config('LOG_FILE', 'logs/bot.log')
LOG_LEVEL = get_config('LOG_LEVEL', 'INFO')

# Статус активности бота
BOT_ACTIVITY_NAME = get_config('BOT_ACTIVITY_NAME', 'RCON') or 'RCON'
bot_activity_type_raw = get_config('BOT_ACTIVITY_TYPE', 'watching') or 'watching'
BOT_ACTIVITY_TYPE = bot_activity_type_raw.lower() if isinstance(bot_activity_type_raw, str) else 'watching'
