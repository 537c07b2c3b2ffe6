import pytest

from rcon_bridge.rcon.status import ConnectionStatus
from rcon_bridge.utils.embeds import create_status_embed
from rcon_bridge.utils.message_utils import split_output
from rcon_bridge.utils.parsers import remove_color_codes
from rcon_bridge.utils.permissions import has_rcon_access


def test_remove_color_codes():
    assert remove_color_codes("§6Time§r set to §l1000\n") == "Time set to 1000"
    assert remove_color_codes("<color=#ff0000>Saved</color>") == "Saved"


def test_split_output_short_text():
    assert split_output("Done") == ["Done"]


def test_split_output_breaks_on_lines():
    text = "aaaa\nbbbb\ncccc"
    assert split_output(text, limit=10) == ["aaaa\nbbbb", "cccc"]


def test_split_output_cuts_long_line():
    assert split_output("x" * 25, limit=10) == ["x" * 10, "x" * 10, "x" * 5]


def test_split_output_rejects_bad_limit():
    with pytest.raises(ValueError):
        split_output("text", limit=0)


def test_has_rcon_access():
    class Role:
        def __init__(self, name):
            self.name = name

    class Permissions:
        def __init__(self, administrator):
            self.administrator = administrator

    class Member:
        def __init__(self, administrator=False, roles=()):
            self.guild_permissions = Permissions(administrator)
            self.roles = [Role(name) for name in roles]

    class User:
        pass

    assert has_rcon_access(Member(administrator=True), [])
    assert has_rcon_access(Member(roles=["Модератор"]), ["Модератор"])
    assert not has_rcon_access(Member(roles=["Игрок"]), ["Модератор"])
    assert not has_rcon_access(Member(), [])
    assert not has_rcon_access(User(), ["Модератор"])


def test_failed_status_embed_mentions_reconnect():
    async def reconnect():
        pass

    embed = create_status_embed(ConnectionStatus.failed("Переподключение к RCON не удалось", reconnect))

    assert embed.title == "❌ RCON не подключен"
    assert embed.description == "Переподключение к RCON не удалось"
    assert "rcon_reconnect" in embed.fields[-1].value
