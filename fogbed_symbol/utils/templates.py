# fogbed_symbol/utils/templates.py

"""
Geração de árvores de configuração a partir de templates

Arquivos terminados em `.j2` são renderizados com Jinja2 (sufixo removido);
os demais são copiados como estão.
"""

import asyncio
import shutil
from pathlib import Path
from typing import Any, Mapping

from jinja2 import FileSystemLoader, StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

from fogbed_symbol.utils.files import PathLike
from fogbed_symbol.utils.logging import get_logger

logger = get_logger('templates')

TEMPLATE_SUFFIX = '.j2'


def _environment(source: Path) -> SandboxedEnvironment:
    return SandboxedEnvironment(
        loader=FileSystemLoader(str(source)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_tree(context: Mapping[str, Any], copy_from: PathLike, copy_to: PathLike) -> int:
    """
    Copia `copy_from` para `copy_to` renderizando os templates

    Args:
        context: Valores disponíveis nos templates
        copy_from: Diretório de origem
        copy_to: Diretório de destino (criado se necessário)

    Returns:
        int: Número de arquivos gerados
    """
    source = Path(copy_from)
    destination = Path(copy_to)
    if not source.is_dir():
        raise FileNotFoundError(f"Template folder does not exist: {source}")

    env = _environment(source)
    count = 0
    for path in sorted(source.rglob('*')):
        relative = path.relative_to(source)
        if path.is_dir():
            (destination / relative).mkdir(parents=True, exist_ok=True)
            continue

        target = destination / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if path.name.endswith(TEMPLATE_SUFFIX):
            target = target.with_name(path.name[: -len(TEMPLATE_SUFFIX)])
            template = env.get_template(relative.as_posix())
            target.write_text(template.render(**context))
            shutil.copymode(path, target)
        else:
            shutil.copy2(path, target)
        count += 1

    logger.debug(f"Generated {count} files: {source} → {destination}")
    return count


async def generate_configuration(
    context: Mapping[str, Any], copy_from: PathLike, copy_to: PathLike
) -> int:
    """Versão assíncrona de `render_tree` (I/O em thread separada)"""
    return await asyncio.to_thread(render_tree, dict(context), copy_from, copy_to)
