import pytest

from ._rpc_helpers import ScriptedRpc


@pytest.fixture
def rpc() -> ScriptedRpc:
    return ScriptedRpc()
