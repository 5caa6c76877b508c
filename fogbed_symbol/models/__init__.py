# fogbed_symbol/models/__init__.py
"""
Modelos de dados para fogbed-symbol
Estruturas dataclass do preset, das identidades geradas e da topologia
"""

from .preset import (
    NodeType,
    TokenDistribution,
    MosaicPreset,
    NemesisPreset,
    NodePreset,
    DatabasePreset,
    GatewayPreset,
    ConfigPreset,
)
from .addresses import NodeAccount, Addresses
from .compose import ComposeService, DockerCompose

__all__ = [
    'NodeType',
    'TokenDistribution',
    'MosaicPreset',
    'NemesisPreset',
    'NodePreset',
    'DatabasePreset',
    'GatewayPreset',
    'ConfigPreset',
    'NodeAccount',
    'Addresses',
    'ComposeService',
    'DockerCompose',
]
