# src/Darkroller/command_loader.py
import importlib
import pkgutil

import structlog

import Darkroller.commands as commands_pkg

log = structlog.get_logger()


def load_all_commands() -> list[str]:
    """Import every module under Darkroller.commands so their decorators register.

    Returns the imported module names; importing twice is a no-op.
    """
    loaded = []
    for m in pkgutil.iter_modules(commands_pkg.__path__, commands_pkg.__name__ + "."):
        importlib.import_module(m.name)
        loaded.append(m.name)
    log.debug("commands.loaded", modules=loaded)
    return loaded
