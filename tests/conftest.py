"""pytest fixtures for uetail tests."""

import pytest

from uetail.channel import EventChannel


def append(path, data):
    if isinstance(data, str):
        data = data.encode('utf-8')
    with open(path, 'ab') as fh:
        fh.write(data)


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / 'Saved' / 'Logs' / 'MyGame.log'


@pytest.fixture
def events():
    return EventChannel()
