# tests/conftest.py

"""
Configuração global de testes do projeto fogbed_symbol
"""

import sys
from pathlib import Path

import pytest

# Adiciona raiz do projeto ao PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.preset_fixtures import (  # noqa: E402
    FakeGenesisBuilder,
    FakeImageBuilder,
    make_preset,
)
from fogbed_symbol.context import RunContext  # noqa: E402
from fogbed_symbol.identity import NetworkType, generate_account  # noqa: E402
from fogbed_symbol.utils import setup_logging  # noqa: E402

setup_logging(level="DEBUG")


def pytest_configure(config):
    """Configuração executada antes dos testes"""
    config.addinivalue_line(
        "markers", "integration: mark test requiring Docker/Fogbed"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )


def pytest_addoption(parser):
    """Adiciona opções customizadas ao pytest"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires Docker and Fogbed)"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return
    skip = pytest.mark.skip(reason="use --run-integration to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def network_type():
    return NetworkType.TEST_NET


@pytest.fixture
def generation_hash_seed(network_type):
    """Seed de geração determinística por teste (chave pública aleatória)"""
    return generate_account(network_type).public_key


@pytest.fixture
def run_context(tmp_path):
    """Contexto apontando para um target temporário"""
    return RunContext(target=tmp_path / "target")


@pytest.fixture
def genesis_builder():
    return FakeGenesisBuilder()


@pytest.fixture
def image_builder():
    return FakeImageBuilder()


@pytest.fixture
def preset_factory():
    """Factory de ConfigPreset a partir de overrides em dict"""
    return make_preset
