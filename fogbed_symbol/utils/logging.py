# fogbed_symbol/utils/logging.py

"""
Logging do fogbed-symbol

- um logger raiz (`fogbed_symbol`) com filhos por módulo;
- prefixo por entidade (nó, gateway, serviço), já que a geração dos nós roda
  em paralelo e as linhas se intercalam;
- log da execução gravado dentro do target, junto dos artefatos gerados;
- nível via FOGBED_SYMBOL_LOG_LEVEL e cores desligadas fora de TTY ou com NO_COLOR.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "fogbed_symbol"
LOG_LEVEL_ENV = "FOGBED_SYMBOL_LOG_LEVEL"
RUN_LOG_FILE = Path("logs") / "fogbed-symbol.log"

# Bibliotecas usadas pelo fogbed que logam cada chamada à API do docker
QUIET_LOGGERS = ("docker", "urllib3")

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


class ColoredFormatter(logging.Formatter):
    """Formatter com cores para terminal"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[92m',
        'WARNING': '\033[93m',
        'ERROR': '\033[91m',
        'CRITICAL': '\033[41m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt=None, datefmt=None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record):
        # cópia: o mesmo record também vai para o handler de arquivo
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if self.use_colors and levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}[{levelname}]{self.RESET}"
        else:
            record.levelname = f"[{levelname}]"
        return super().format(record)


class EntityAdapter(logging.LoggerAdapter):
    """Prefixa as mensagens com o nome da entidade: `[peer-node-0] ...`"""

    def process(self, msg, kwargs):
        entity = self.extra["entity"]
        kwargs.setdefault("extra", {}).setdefault("entity", entity)
        return f"[{entity}] {msg}", kwargs


def entity_logger(logger: Union[logging.Logger, logging.LoggerAdapter], entity: str) -> EntityAdapter:
    if isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger
    return EntityAdapter(logger, {"entity": entity})


def resolve_level(level: Union[int, str, None] = None) -> int:
    """Nível explícito, senão FOGBED_SYMBOL_LOG_LEVEL, senão INFO"""
    value = level if level is not None else os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {value}")
    return resolved


def colors_enabled(stream) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    level: Union[int, str, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    target: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configurar logger centralizado

    Args:
        name: Nome do logger
        level: Nível de logging (padrão: FOGBED_SYMBOL_LOG_LEVEL ou INFO)
        log_file: Arquivo de log explícito (opcional)
        target: Diretório de saída; grava logs/fogbed-symbol.log dentro dele

    Returns:
        logger: Logger configurado
    """
    level = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S', use_colors=colors_enabled(sys.stdout))
    )
    logger.addHandler(console_handler)

    files = [Path(log_file)] if log_file else []
    if target is not None:
        files.append(Path(target) / RUN_LOG_FILE)
    for path in files:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Obter logger filho de `fogbed_symbol`"""
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
