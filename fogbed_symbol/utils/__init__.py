# fogbed_symbol/utils/__init__.py

"""
Utilities para fogbed-symbol
"""

from .logging import setup_logging, get_logger, entity_logger
from .files import (
    mkdir,
    delete_folder,
    read_yaml,
    write_yaml,
    read_json,
    write_json,
    write_text,
    write_binary,
    docker_user_group,
)
from .templates import render_tree, generate_configuration
from .process import run_command
from .validation import (
    validate_ip,
    validate_port,
    validate_open_port,
    validate_container_name,
    validate_network_config,
)

__all__ = [
    # Logging
    'setup_logging',
    'get_logger',
    'entity_logger',

    # Files
    'mkdir',
    'delete_folder',
    'read_yaml',
    'write_yaml',
    'read_json',
    'write_json',
    'write_text',
    'write_binary',
    'docker_user_group',

    # Templates / processos
    'render_tree',
    'generate_configuration',
    'run_command',

    # Validation
    'validate_ip',
    'validate_port',
    'validate_open_port',
    'validate_container_name',
    'validate_network_config',
]
