# fogbed_symbol/presets.py

"""
Carregamento de presets

Camadas, da menor para a maior precedência:
    presets/shared.yml → presets/<preset>/network.yml
    → presets/<preset>/assembly-<assembly>.yml → preset customizado do usuário
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fogbed_symbol.context import PACKAGE_ROOT, Preset, RunContext
from fogbed_symbol.exceptions import InvalidPresetError, MissingPrerequisiteError
from fogbed_symbol.models import Addresses, ConfigPreset
from fogbed_symbol.utils import get_logger, read_yaml, validate_network_config

logger = get_logger("presets")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge recursivo de dicts; listas e escalares de `override` substituem"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _read_layer(path: Path) -> Dict[str, Any]:
    data = read_yaml(path) or {}
    if not isinstance(data, dict):
        raise InvalidPresetError(f"Preset file {path} must contain a mapping")
    logger.debug(f"Preset layer loaded: {path}")
    return data


def load_preset_dict(
    root: Path = PACKAGE_ROOT,
    preset: Union[Preset, str] = Preset.BOOTSTRAP,
    assembly: Optional[str] = None,
    custom_preset: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    presets_dir = Path(root) / "presets"
    preset_name = str(preset)

    network_file = presets_dir / preset_name / "network.yml"
    if not network_file.exists():
        raise MissingPrerequisiteError(f"Preset {preset_name} does not exist ({network_file})")

    data = _read_layer(presets_dir / "shared.yml")
    data = deep_merge(data, _read_layer(network_file))

    if assembly:
        assembly_file = presets_dir / preset_name / f"assembly-{assembly}.yml"
        if not assembly_file.exists():
            raise MissingPrerequisiteError(f"Assembly {assembly} does not exist for preset {preset_name}")
        data = deep_merge(data, _read_layer(assembly_file))

    if custom_preset:
        custom_file = Path(custom_preset)
        if not custom_file.exists():
            raise MissingPrerequisiteError(f"Custom preset {custom_file} does not exist")
        data = deep_merge(data, _read_layer(custom_file))

    return data


def validate_preset(preset: ConfigPreset) -> ConfigPreset:
    """
    Raises:
        InvalidPresetError: com a lista de problemas encontrados
    """
    valid, errors = validate_network_config(preset.nodes, preset.databases, preset.gateways)
    if not valid:
        raise InvalidPresetError(f"Invalid preset: {'; '.join(errors)}", errors=errors)
    return preset


def load_preset_data(
    root: Path = PACKAGE_ROOT,
    preset: Union[Preset, str] = Preset.BOOTSTRAP,
    assembly: Optional[str] = None,
    custom_preset: Optional[Union[str, Path]] = None,
) -> ConfigPreset:
    """Carrega, mescla e valida as camadas do preset"""
    logger.info(f"Loading preset {preset}" + (f" (assembly {assembly})" if assembly else ""))
    data = load_preset_dict(root, preset, assembly, custom_preset)
    try:
        config_preset = ConfigPreset.from_dict(data)
    except (KeyError, ValueError) as e:
        raise InvalidPresetError(f"Invalid preset: {e}") from e
    return validate_preset(config_preset)


def load_existing_preset_data(context: RunContext) -> ConfigPreset:
    if not context.preset_file.exists():
        raise MissingPrerequisiteError(
            f"{context.preset_file} does not exist. Have you executed the 'config' command?"
        )
    return ConfigPreset.from_dict(read_yaml(context.preset_file))


def load_existing_addresses(context: RunContext) -> Addresses:
    if not context.addresses_file.exists():
        raise MissingPrerequisiteError(
            f"{context.addresses_file} does not exist. Have you executed the 'config' command?"
        )
    return Addresses.from_dict(read_yaml(context.addresses_file))
