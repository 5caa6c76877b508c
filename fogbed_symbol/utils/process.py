# fogbed_symbol/utils/process.py

"""
Execução de comandos externos (docker build/tag/push, nemgen)
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence, Union

from fogbed_symbol.exceptions import ProcessError
from fogbed_symbol.utils.logging import get_logger

logger = get_logger('process')


async def run_command(
    command: Sequence[str],
    cwd: Optional[Union[str, Path]] = None,
) -> str:
    """
    Executa comando e retorna stdout

    Args:
        command: Comando e argumentos
        cwd: Diretório de trabalho

    Returns:
        str: Saída padrão do comando

    Raises:
        ProcessError: Se o comando terminar com código diferente de zero
    """
    command = [str(part) for part in command]
    logger.debug(f"Exec: {' '.join(command)}")

    process = await asyncio.create_subprocess_exec(
        *command,
        cwd=str(cwd) if cwd else None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        logger.error(f"Command failed (exit {process.returncode}): {' '.join(command)}")
        raise ProcessError(command, process.returncode, stderr.decode(errors='replace'))

    return stdout.decode(errors='replace')
