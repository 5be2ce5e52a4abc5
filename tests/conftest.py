import os
import sys

import pytest

# Make the root-level entry point modules importable.
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

FIXTURES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'fixtures')


@pytest.fixture
def cattle_dir():
    return os.path.join(FIXTURES_DIR, 'cattle')


@pytest.fixture
def v3_dir():
    return os.path.join(FIXTURES_DIR, 'v3')
