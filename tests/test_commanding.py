from Darkroller.command_loader import load_all_commands
from Darkroller.commanding import all_commands, command_key, find_command


def test_loader_imports_command_modules():
    loaded = load_all_commands()
    assert "Darkroller.commands.roll" in loaded
    assert "Darkroller.commands.help" in loaded
    # Loading again registers nothing new
    before = all_commands()
    load_all_commands()
    assert all_commands().keys() == before.keys()


def test_command_keys():
    assert command_key("roll") == "roll"
    assert command_key("dice", "pool") == "dice:pool"
    load_all_commands()
    assert all_commands()["roll"].key == "roll"


def test_find_command_falls_back_to_top_level():
    load_all_commands()
    roll = find_command("roll", None)
    assert roll is not None
    assert find_command("roll", "unknown") is roll
    assert find_command("nope", None) is None
