import pytest

from splitdump.auxdata import AuxiliaryData
from splitdump.classifier import Classifier

from .archive_builder import ArchiveBuilder
from .testwriter import TestWriter


pytest_plugins = ("tests.fix_db",)


@pytest.fixture
def aux_data():
    """Return an empty `AuxiliaryData` to fill for the test."""
    return AuxiliaryData()


@pytest.fixture
def classifier(aux_data):
    """Return a `Classifier` using the `aux_data` fixture."""
    return Classifier(aux_data)


@pytest.fixture
def archive():
    """Return an `ArchiveBuilder` to create a custom format archive."""
    return ArchiveBuilder()


@pytest.fixture
def writer():
    """Return a writer keeping the written files in memory."""
    return TestWriter()
