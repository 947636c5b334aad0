import pytest

from cliconf.config._testing import FakeCrypto, isolated_environment


@pytest.fixture
def settings(tmp_path):
    """Settings with home and project roots isolated under ``tmp_path``."""
    with isolated_environment(tmp_path) as isolated:
        yield isolated


@pytest.fixture
def crypto() -> FakeCrypto:
    return FakeCrypto()
