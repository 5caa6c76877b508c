# fogbed_symbol/utils/files.py

"""
Leitura e escrita dos artefatos gerados (YAML, JSON, binários)
"""

import json
import os
import shutil
from pathlib import Path
from typing import Any, Union

import yaml

from fogbed_symbol.utils.logging import get_logger

logger = get_logger('files')

PathLike = Union[str, Path]


def mkdir(path: PathLike) -> Path:
    """Cria diretório (e pais) se não existir"""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def delete_folder(path: PathLike) -> None:
    """Remove diretório recursivamente (sem erro se não existir)"""
    path = Path(path)
    if path.exists():
        logger.info(f"Deleting folder {path}")
        shutil.rmtree(path)


def read_yaml(path: PathLike) -> Any:
    with open(path, 'r') as f:
        return yaml.safe_load(f)


def write_yaml(path: PathLike, data: Any) -> Path:
    """Escreve YAML preservando a ordem de inserção das chaves"""
    path = Path(path)
    mkdir(path.parent)
    with open(path, 'w') as f:
        yaml.safe_dump(data, f, sort_keys=False, default_flow_style=False)
    logger.debug(f"YAML written: {path}")
    return path


def write_json(path: PathLike, data: Any) -> Path:
    path = Path(path)
    mkdir(path.parent)
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)
    return path


def read_json(path: PathLike) -> Any:
    with open(path, 'r') as f:
        return json.load(f)


def write_text(path: PathLike, content: str) -> Path:
    path = Path(path)
    mkdir(path.parent)
    path.write_text(content)
    return path


def write_binary(path: PathLike, content: bytes) -> Path:
    path = Path(path)
    mkdir(path.parent)
    path.write_bytes(content)
    return path


def docker_user_group() -> str:
    """uid:gid do processo corrente (formato do campo `user` do compose)"""
    return f"{os.getuid()}:{os.getgid()}"
