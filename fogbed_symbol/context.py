# fogbed_symbol/context.py

"""
Contexto de execução passado explicitamente para cada serviço

Substitui estado global: diretório alvo, reset, raiz dos recursos e logger.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from fogbed_symbol.utils import get_logger

PACKAGE_ROOT = Path(__file__).resolve().parent

# Subdiretório do target onde ficam as árvores por nó
WORKING_DIR = "nodes"

DEFAULT_REGISTRY = os.getenv("FOGBED_SYMBOL_REGISTRY", "localhost:5000")
DEFAULT_REPOSITORY = os.getenv("FOGBED_SYMBOL_REPOSITORY", "symbol-repository")


class Preset(Enum):
    """Presets embarcados no pacote"""

    BOOTSTRAP = "bootstrap"
    LIGHT = "light"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class RunContext:
    """
    Attributes:
        target: Diretório de saída
        root: Raiz dos recursos (templates e presets)
        reset: Apaga artefatos existentes antes de gerar
        logger: Destino dos logs
    """

    target: Path
    root: Path = PACKAGE_ROOT
    reset: bool = False
    logger: logging.Logger = field(default_factory=lambda: get_logger("bootstrap"))

    def __post_init__(self):
        object.__setattr__(self, "target", Path(self.target))
        object.__setattr__(self, "root", Path(self.root))

    @property
    def working_dir(self) -> Path:
        return self.target / WORKING_DIR

    @property
    def config_dir(self) -> Path:
        return self.target / "config"

    @property
    def docker_dir(self) -> Path:
        return self.target / "docker"

    @property
    def addresses_file(self) -> Path:
        return self.working_dir / "generated-addresses" / "addresses.yml"

    @property
    def preset_file(self) -> Path:
        return self.config_dir / "preset.yml"

    @property
    def nemesis_dir(self) -> Path:
        return self.working_dir / "nemesis"

    def templates(self, name: str) -> Path:
        return self.root / "templates" / name


@dataclass(frozen=True)
class ConfigParams:
    preset: Preset = Preset.BOOTSTRAP
    assembly: Optional[str] = None
    custom_preset: Optional[Path] = None


@dataclass(frozen=True)
class ComposeParams:
    """
    Attributes:
        user: 'current' (uid:gid do processo), vazio (usuário da imagem) ou valor literal
        push: Embute volumes em novas imagens e publica no registry
        registry: Host do registry remoto
        repository: Repositório das imagens geradas
    """

    user: Optional[str] = "current"
    push: bool = False
    registry: str = DEFAULT_REGISTRY
    repository: str = DEFAULT_REPOSITORY
