# tests/fixtures/preset_fixtures.py

"""
Fixtures de presets e dublês dos builders externos (nemgen, docker)
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Tuple

from fogbed_symbol.models import ConfigPreset

BASE_PRESET: Dict[str, Any] = {
    "networkType": 152,
    "symbolServerImage": "symbolplatform/symbol-server:test",
    "symbolRestImage": "symbolplatform/symbol-rest:test",
    "mongoImage": "mongo:test",
    "databases": [{"name": "db"}],
    "nodes": [
        {
            "name": "api-node",
            "type": "api-node",
            "roles": "Peer,Api",
            "databaseHost": "db",
            "brokerHost": "broker",
            "openPort": True,
        },
    ],
    "gateways": [
        {"name": "rest-gateway", "apiNodeName": "api-node", "databaseHost": "db", "openPort": 3000},
    ],
    "nemesis": {
        "mosaics": [{"name": "cat.currency", "supply": 1000, "accounts": 2}],
    },
}


def make_preset(**overrides) -> ConfigPreset:
    data = copy.deepcopy(BASE_PRESET)
    data.update(overrides)
    return ConfigPreset.from_dict(data)


class FakeGenesisBuilder:
    """Simula o nemgen: grava um bloco falso na seed"""

    def __init__(self):
        self.calls: List[Tuple[ConfigPreset, Path]] = []

    async def build(self, preset: ConfigPreset, nemesis_dir: Path) -> None:
        self.calls.append((preset, Path(nemesis_dir)))
        block = Path(nemesis_dir) / "seed" / "00000" / "00001.dat"
        block.parent.mkdir(parents=True, exist_ok=True)
        block.write_bytes(b"nemesis")


class FakeImageBuilder:
    """Registra build/tag/push sem chamar o docker"""

    def __init__(self):
        self.built: List[Tuple[Path, Path, str]] = []
        self.tagged: List[Tuple[str, str]] = []
        self.pushed: List[str] = []

    async def build(self, context_dir: Path, dockerfile: Path, image: str) -> None:
        self.built.append((Path(context_dir), Path(dockerfile), image))

    async def tag(self, source: str, target: str) -> None:
        self.tagged.append((source, target))

    async def push(self, image: str) -> None:
        self.pushed.append(image)
