# fogbed_symbol/config.py

"""
Resolução da configuração por nó

Gera as identidades da rede (addresses.yml), completa o preset com os
valores derivados e materializa as árvores de configuração de nós e
gateways, incluindo os arquivos de descoberta de peers por papel.
"""

import asyncio
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from fogbed_symbol.certificates import CertificateProvider, GeneratedCertificateProvider
from fogbed_symbol.context import ConfigParams, RunContext
from fogbed_symbol.exceptions import MissingPrerequisiteError
from fogbed_symbol.genesis import GenesisAssembler
from fogbed_symbol.identity import (
    Account,
    NetworkType,
    account_from_private_key,
    derive_address,
    derive_mosaic_id,
    generate_account,
    generate_accounts,
    to_hex_id,
)
from fogbed_symbol.models import (
    Addresses,
    ConfigPreset,
    GatewayPreset,
    NodeAccount,
    NodePreset,
    NodeType,
)
from fogbed_symbol.presets import (
    load_existing_addresses,
    load_existing_preset_data,
    load_preset_data,
)
from fogbed_symbol.supply import distribute
from fogbed_symbol.utils import (
    delete_folder,
    entity_logger,
    generate_configuration,
    mkdir,
    write_json,
    write_yaml,
)

NODE_PORT = 7900

PEER_FILES = {
    NodeType.PEER_NODE: "peers-p2p.json",
    NodeType.API_NODE: "peers-api.json",
}


@dataclass(frozen=True)
class ConfigLayer:
    """Camada nomeada de valores de configuração"""

    name: str
    values: Mapping[str, Any]


def merge_layers(layers: Sequence[ConfigLayer]) -> Dict[str, Any]:
    """Mescla camadas em ordem crescente de precedência (a última vence)"""
    merged: Dict[str, Any] = {}
    for layer in layers:
        merged.update(layer.values)
    return merged


@dataclass(frozen=True)
class EntityContext:
    """Contexto de template de um nó ou gateway"""

    name: str
    layers: Tuple[ConfigLayer, ...]

    @property
    def values(self) -> Dict[str, Any]:
        return merge_layers(self.layers)

    def layer(self, name: str) -> Optional[ConfigLayer]:
        return next((l for l in self.layers if l.name == name), None)


@dataclass(frozen=True)
class ConfigResult:
    addresses: Addresses
    preset: ConfigPreset


def resolve_node_context(
    preset: ConfigPreset, account: NodeAccount, node_preset: Optional[NodePreset]
) -> EntityContext:
    """preset da rede → valores gerados → overrides do nó"""
    generated = {
        "name": account.name,
        "type": str(account.type),
        "friendlyName": (node_preset.friendly_name if node_preset else None) or account.friendly_name,
        "harvesterSigningPrivateKey": account.signing.private_key,
        "harvesterVrfPrivateKey": account.vrf.private_key,
    }
    return EntityContext(
        name=account.name,
        layers=(
            ConfigLayer("preset", preset.to_dict()),
            ConfigLayer("generated", generated),
            ConfigLayer("node", node_preset.to_dict() if node_preset else {}),
        ),
    )


def resolve_gateway_context(
    preset: ConfigPreset, account: Account, gateway_preset: GatewayPreset, index: int
) -> EntityContext:
    """preset da rede → chave gerada do gateway → overrides do gateway"""
    generated = {
        "name": f"rest-gateway-{index}",
        "restPrivateKey": account.private_key,
    }
    layers = (
        ConfigLayer("preset", preset.to_dict()),
        ConfigLayer("generated", generated),
        ConfigLayer("gateway", gateway_preset.to_dict()),
    )
    return EntityContext(name=merge_layers(layers)["name"], layers=layers)


def build_known_peers(preset: ConfigPreset, addresses: Addresses, node_type: NodeType) -> Dict[str, Any]:
    """
    Descritor de peers de um papel

    Nós gerados localmente primeiro (ordem do preset), depois os peers
    estáticos declarados no preset para o mesmo papel.
    """
    local_peers = []
    for index, node in enumerate(addresses.nodes):
        if node.type != node_type:
            continue
        node_preset = preset.nodes[index] if index < len(preset.nodes) else None
        local_peers.append({
            "publicKey": node.ssl.public_key,
            "endpoint": {
                "host": node.name,
                "port": NODE_PORT,
            },
            "metadata": {
                "name": node.name,
                "roles": node_preset.roles if node_preset else None,
            },
        })
    return {
        "_info": f"this file contains a list of {node_type} peers",
        "knownPeers": local_peers + preset.known_peers_for(node_type),
    }


class ConfigService:
    """
    Gera a configuração completa de um target

    Exemplos de uso:
        >>> context = RunContext(target=Path("target"))
        >>> result = asyncio.run(ConfigService(context).run())
    """

    def __init__(
        self,
        context: RunContext,
        params: ConfigParams = ConfigParams(),
        certificates: Optional[CertificateProvider] = None,
        genesis: Optional[GenesisAssembler] = None,
    ):
        self.context = context
        self.params = params
        self.logger = context.logger
        self.certificates = certificates
        self.genesis = genesis or GenesisAssembler(context)

    async def run(self) -> ConfigResult:
        if self.context.reset:
            delete_folder(self.context.config_dir)

        if self.context.config_dir.exists():
            self.logger.info("Config folder exist, ignoring configuration. (run -r to reset)")
            return ConfigResult(
                addresses=load_existing_addresses(self.context),
                preset=load_existing_preset_data(self.context),
            )

        preset = load_preset_data(
            self.context.root,
            self.params.preset,
            self.params.assembly,
            self.params.custom_preset,
        )

        # fase sequencial: todos os valores derivados antes de qualquer fan-out
        mkdir(self.context.addresses_file.parent)
        addresses, preset = await self.generate_addresses(preset)
        preset = self.complete_preset(preset, addresses)
        preset = self.genesis.apply_opt_in(preset)
        write_yaml(self.context.addresses_file, addresses.to_dict())

        # fase de leitura: preset final, imutável
        await self.generate_nodes(preset, addresses)
        await self.genesis.run(preset, addresses)
        await self.generate_gateways(preset, addresses)

        write_yaml(self.context.preset_file, preset.to_dict())
        self.logger.info("✅ Configuration generated.")
        return ConfigResult(addresses=addresses, preset=preset)

    # ---------- Identidades ----------

    async def generate_node_account(
        self, index: int, node: NodePreset, network_type: NetworkType
    ) -> NodeAccount:
        name = node.name or f"{node.type}-{index}"
        signing = generate_account(network_type)
        vrf = generate_account(network_type)
        ssl = await self._certificates(network_type).issue(name)
        friendly_name = node.friendly_name or ssl.public_key[:7]
        return NodeAccount(
            signing=signing,
            vrf=vrf,
            ssl=ssl,
            type=node.type,
            name=name,
            friendly_name=friendly_name,
        )

    def _certificates(self, network_type: NetworkType) -> CertificateProvider:
        if self.certificates is None:
            self.certificates = GeneratedCertificateProvider(network_type)
        return self.certificates

    async def generate_addresses(self, preset: ConfigPreset) -> Tuple[Addresses, ConfigPreset]:
        """
        Gera todas as identidades e calcula as distribuições de tokens

        Returns:
            tuple: (Addresses, preset com chave do signer e distribuições preenchidas)
        """
        network_type = preset.network_type
        seed = preset.nemesis_generation_hash_seed or generate_account(network_type).public_key

        nodes = tuple(await asyncio.gather(*[
            self.generate_node_account(index, node, network_type)
            for index, node in enumerate(preset.nodes)
        ]))
        gateways = tuple(generate_accounts(network_type, len(preset.gateways)))

        nemesis_signer = None
        mosaic_accounts: Dict[str, Tuple[Account, ...]] = {}
        nemesis = preset.nemesis
        if nemesis:
            if nemesis.nemesis_signer_private_key:
                nemesis_signer = account_from_private_key(nemesis.nemesis_signer_private_key, network_type)
            else:
                nemesis_signer = generate_account(network_type)
                nemesis = replace(nemesis, nemesis_signer_private_key=nemesis_signer.private_key)

            mosaics = []
            for mosaic in nemesis.mosaics:
                accounts = tuple(generate_accounts(network_type, mosaic.accounts))
                mosaic_accounts[mosaic.name] = accounts
                beneficiaries = [a.address for a in accounts] + [n.signing.address for n in nodes]
                distributions = distribute(
                    mosaic.supply,
                    beneficiaries,
                    explicit=mosaic.currency_distributions,
                    name=mosaic.name,
                )
                mosaics.append(replace(mosaic, currency_distributions=distributions))
            nemesis = replace(nemesis, mosaics=tuple(mosaics))

        addresses = Addresses(
            network_type=network_type,
            nemesis_generation_hash_seed=seed,
            nodes=nodes,
            gateways=gateways,
            nemesis_signer=nemesis_signer,
            mosaics=mosaic_accounts,
        )
        preset = replace(
            preset,
            nodes=tuple(replace(n, name=a.name) for n, a in zip(preset.nodes, nodes)),
            gateways=tuple(
                replace(g, name=g.name or f"rest-gateway-{index}")
                for index, g in enumerate(preset.gateways)
            ),
            nemesis=nemesis,
            nemesis_signer_public_key=preset.nemesis_signer_public_key
            or (nemesis_signer.public_key if nemesis_signer else None),
        )
        self.logger.info(
            f"Generated {len(nodes)} node accounts, {len(gateways)} gateway accounts "
            f"and {sum(len(a) for a in mosaic_accounts.values())} beneficiary accounts"
        )
        return addresses, preset

    @staticmethod
    def complete_preset(preset: ConfigPreset, addresses: Addresses) -> ConfigPreset:
        """Preenche identificadores de rede, seed do genesis e ids de mosaico"""
        network_type = preset.network_type
        currency_id = preset.currency_mosaic_id
        harvesting_id = preset.harvesting_mosaic_id

        if not currency_id or not harvesting_id:
            if not preset.nemesis_signer_public_key:
                raise MissingPrerequisiteError("nemesisSignerPublicKey must be defined to derive mosaic ids")
            owner = derive_address(preset.nemesis_signer_public_key, network_type)
            if not currency_id:
                currency_id = to_hex_id(derive_mosaic_id(0, owner))
            if not harvesting_id:
                if not preset.nemesis:
                    raise MissingPrerequisiteError("nemesis must be defined!")
                if len(preset.nemesis.mosaics) > 1:
                    harvesting_id = to_hex_id(derive_mosaic_id(1, owner))
                else:
                    harvesting_id = currency_id

        return replace(
            preset,
            network_identifier=network_type.identifier,
            network_name=network_type.network_name,
            nemesis_generation_hash_seed=preset.nemesis_generation_hash_seed
            or addresses.nemesis_generation_hash_seed,
            currency_mosaic_id=currency_id,
            harvesting_mosaic_id=harvesting_id,
        )

    # ---------- Árvores de configuração ----------

    def node_folder(self, name: str) -> Path:
        return self.context.working_dir / name

    async def generate_nodes(self, preset: ConfigPreset, addresses: Addresses) -> None:
        await asyncio.gather(*[
            self.generate_node_configuration(account, index, preset, addresses)
            for index, account in enumerate(addresses.nodes)
        ])

    async def generate_node_configuration(
        self, account: NodeAccount, index: int, preset: ConfigPreset, addresses: Addresses
    ) -> Path:
        output_folder = self.node_folder(account.name) / "userconfig"
        node_preset = preset.nodes[index] if index < len(preset.nodes) else None
        context = resolve_node_context(preset, account, node_preset)
        log = entity_logger(self.logger, account.name)
        log.debug(f"Rendering templates into {output_folder}")

        await generate_configuration(context.values, self.context.templates("node"), output_folder)
        for node_type, file_name in PEER_FILES.items():
            write_json(
                output_folder / "resources" / file_name,
                build_known_peers(preset, addresses, node_type),
            )
        log.info(f"Node configured ({account.type})")
        return output_folder

    async def generate_gateways(self, preset: ConfigPreset, addresses: Addresses) -> List[Path]:
        return list(await asyncio.gather(*[
            self.generate_gateway_configuration(account, index, preset)
            for index, account in enumerate(addresses.gateways)
        ]))

    async def generate_gateway_configuration(
        self, account: Account, index: int, preset: ConfigPreset
    ) -> Path:
        gateway_preset = preset.gateways[index]
        context = resolve_gateway_context(preset, account, gateway_preset, index)
        move_to = self.node_folder(context.name)
        log = entity_logger(self.logger, context.name)

        await generate_configuration(context.values, self.context.templates("rest-gateway"), move_to)
        if gateway_preset.api_node_name:
            api_resources = self.node_folder(gateway_preset.api_node_name) / "userconfig" / "resources"
            log.debug(f"Copying resources of {gateway_preset.api_node_name}")
            await generate_configuration({}, api_resources, move_to / "api-node-config")
        log.info("Gateway configured")
        return move_to
