"""
Утилиты
"""
from .parsers import remove_color_codes
from .embeds import (
    create_status_embed,
    create_error_embed
)
from .message_utils import split_output, send_code_blocks
from .permissions import has_rcon_access

__all__ = [
    'remove_color_codes',
    'create_status_embed',
    'create_error_embed',
    'split_output',
    'send_code_blocks',
    'has_rcon_access'
]
