import io

import pytest

from onu_client.config import ClientConfig
from onu_client.render import ConsolePresenter

from onu_client.tests.fakes import FakeChannel, ScriptedPrompter


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def presenter(output):
    return ConsolePresenter(out=output, color=False)


@pytest.fixture
def config():
    return ClientConfig(onu_url="https://onu.example.org")
