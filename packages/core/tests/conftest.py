import pytest

from bumpr_core.config import DEFAULT_CONFIG, _deep_merge, build_config


@pytest.fixture
def make_config():
    """Build a typed Config from overrides on top of the defaults.

    ``environ`` defaults to an empty mapping so the host environment never
    leaks into a test.
    """

    def _make(overrides=None, environ=None):
        data = _deep_merge(DEFAULT_CONFIG, overrides or {})
        return build_config(data, environ=environ or {})

    return _make
