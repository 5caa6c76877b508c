# fogbed_symbol/__init__.py

"""
fogbed-symbol: gerador de configuração e genesis de redes Symbol/catapult,
com topologia docker-compose e execução local via Fogbed
"""

from fogbed_symbol.bootstrap import BootstrapService
from fogbed_symbol.compose import ComposeBuilder
from fogbed_symbol.config import ConfigResult, ConfigService
from fogbed_symbol.context import ComposeParams, ConfigParams, Preset, RunContext
from fogbed_symbol.genesis import GenesisAssembler

__version__ = "0.1.0"

__all__ = [
    "BootstrapService",
    "ComposeBuilder",
    "ConfigResult",
    "ConfigService",
    "ComposeParams",
    "ConfigParams",
    "Preset",
    "RunContext",
    "GenesisAssembler",
]
