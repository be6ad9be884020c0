import os

import pytest

from gc_events.catalogue import default_registry
from gc_events.stream import parse_lines


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')


def fixture_path(name):
    return os.path.join(FIXTURES_DIR, name)


@pytest.fixture
def registry():
    """The built-in, validated registry."""
    return default_registry()


@pytest.fixture
def parse_fixture():
    """Parse one of the sample logs under tests/fixtures/."""
    def _parse(name, **kwargs):
        with open(fixture_path(name), encoding='utf-8') as f:
            return parse_lines(f, **kwargs)
    return _parse


@pytest.fixture
def log_file(tmp_path):
    """Write the given lines to a temporary log file and return its path."""
    def _write(lines, name='gc.log'):
        path = tmp_path / name
        path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
        return path
    return _write
