# tests/conftest.py

import os

import nacl.signing
import pytest

# Settings are read when Darkroller.app is imported, so the environment must be
# in place before any test module imports it. Keep logs off disk and out of
# pytest's captured streams.
os.environ["LOGGING_CONSOLE"] = "NONE"
os.environ["LOGGING_FILE"] = "NONE"
os.environ["ENV"] = "test"

# Ephemeral key pair standing in for the Discord application key
_SIGNING_KEY = nacl.signing.SigningKey.generate()
os.environ["DISCORD_PUBLIC_KEY"] = _SIGNING_KEY.verify_key.encode().hex()

from Darkroller.metrics import reset_counters  # noqa: E402
from Darkroller.rules.dice import ScriptedRNG  # noqa: E402
from Darkroller.rules.engine import CodRuleset  # noqa: E402


class SpyResponder:
    def __init__(self):
        self.messages: list[tuple[str, bool]] = []

    async def send(self, content: str, *, ephemeral: bool = False):  # noqa: ANN001
        self.messages.append((content, ephemeral))


@pytest.fixture
def signing_key() -> nacl.signing.SigningKey:
    return _SIGNING_KEY


@pytest.fixture
def responder() -> SpyResponder:
    return SpyResponder()


@pytest.fixture
def scripted_ruleset():
    """Build a CodRuleset whose dice come from a fixed list of faces."""

    def _make(*faces: int) -> CodRuleset:
        return CodRuleset(rng=ScriptedRNG(faces))

    return _make


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_counters()
    yield
