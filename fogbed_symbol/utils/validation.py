# fogbed_symbol/utils/validation.py
"""
Validação de inputs para fogbed-symbol
"""

import re
from ipaddress import ip_address

from fogbed_symbol.utils.logging import get_logger

logger = get_logger('validation')

# Docker: lowercase, numbers, dash, underscore, max 63 chars
CONTAINER_NAME_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_.-]{0,62}$')


def validate_ip(ip_str):
    """
    Validar endereço IP

    Args:
        ip_str: String de IP

    Returns:
        bool: IP válido
    """
    try:
        ip_address(ip_str)
        return True
    except ValueError as e:
        logger.error(f"❌ Invalid IP: {ip_str} - {str(e)}")
        return False


def validate_port(port):
    """
    Validar porta (1-65535)

    Args:
        port: Número da porta

    Returns:
        bool: Porta válida
    """
    try:
        port_num = int(port)
    except (ValueError, TypeError):
        logger.error(f"❌ Invalid port type: {port}")
        return False

    valid = 1 <= port_num <= 65535
    if not valid:
        logger.error(f"❌ Port out of range: {port_num}")
    return valid


def validate_open_port(value):
    """Valida flag de porta aberta: bool, 'true'/'false' ou número de porta"""
    if value is None or isinstance(value, bool):
        return True
    if isinstance(value, str) and value.lower() in ('true', 'false', ''):
        return True
    return validate_port(value)


def validate_container_name(name):
    """
    Validar nome de container (Docker naming rules)

    Args:
        name: Nome do container

    Returns:
        bool: Nome válido
    """
    valid = isinstance(name, str) and bool(CONTAINER_NAME_PATTERN.match(name))
    if not valid:
        logger.error(f"❌ Invalid container name: {name}")
    return valid


def validate_network_config(nodes, databases, gateways):
    """
    Validar topologia completa (nós, bancos e gateways)

    Args:
        nodes: Lista de NodePreset
        databases: Lista de DatabasePreset
        gateways: Lista de GatewayPreset

    Returns:
        tuple: (bool, list of errors)
    """
    errors = []
    all_names = set()

    def register(name, kind):
        if not validate_container_name(name):
            errors.append(f"Invalid {kind} name: {name}")
        if name in all_names:
            errors.append(f"Duplicate name: {name}")
        all_names.add(name)

    for database in databases:
        register(database.name, 'database')
        if not validate_open_port(database.open_port):
            errors.append(f"Invalid openPort for {database.name}: {database.open_port}")

    database_names = {d.name for d in databases}
    node_names = set()

    for node in nodes:
        if node.name:
            register(node.name, 'node')
            node_names.add(node.name)
        if node.broker_host:
            register(node.broker_host, 'broker')
        if node.database_host and node.database_host not in database_names:
            errors.append(f"Node {node.name} references unknown database {node.database_host}")
        for value in (node.open_port, node.open_broker_port):
            if not validate_open_port(value):
                errors.append(f"Invalid open port for {node.name}: {value}")

    for gateway in gateways:
        if gateway.name:
            register(gateway.name, 'gateway')
        if gateway.database_host and gateway.database_host not in database_names:
            errors.append(f"Gateway {gateway.name} references unknown database {gateway.database_host}")
        if gateway.api_node_name and gateway.api_node_name not in node_names:
            errors.append(f"Gateway {gateway.name} references unknown api node {gateway.api_node_name}")
        if not validate_open_port(gateway.open_port):
            errors.append(f"Invalid openPort for {gateway.name}: {gateway.open_port}")

    if errors:
        logger.error("❌ Network config validation failed:")
        for error in errors:
            logger.error(f"   - {error}")
        return (False, errors)

    logger.info(
        f"✅ Valid network config: {len(nodes)} nodes, "
        f"{len(databases)} databases, {len(gateways)} gateways"
    )
    return (True, [])
