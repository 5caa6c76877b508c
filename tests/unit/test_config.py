# tests/unit/test_config.py

"""
Testes da resolução de configuração (ConfigService)

O nemgen é substituído por FakeGenesisBuilder; templates e presets são os
embarcados no pacote.
"""

import json
import logging

import pytest
import yaml

from fogbed_symbol.config import (
    ConfigLayer,
    ConfigService,
    EntityContext,
    build_known_peers,
    merge_layers,
    resolve_node_context,
)
from fogbed_symbol.context import ConfigParams, Preset, RunContext
from fogbed_symbol.exceptions import MissingPrerequisiteError
from fogbed_symbol.genesis import GenesisAssembler
from fogbed_symbol.identity import derive_address, derive_mosaic_id, generate_account, to_hex_id
from fogbed_symbol.models import Addresses, NodeAccount, NodeType
from fogbed_symbol.supply import total_supplied
from fogbed_symbol.transactions import create_vrf_key_link, verify_signature


def _service(context, genesis_builder, params=ConfigParams(preset=Preset.LIGHT)):
    return ConfigService(context, params, genesis=GenesisAssembler(context, builder=genesis_builder))


def _node_account(network_type, name, node_type=NodeType.PEER_NODE):
    return NodeAccount(
        signing=generate_account(network_type),
        vrf=generate_account(network_type),
        ssl=generate_account(network_type),
        type=node_type,
        name=name,
        friendly_name=name.upper(),
    )


# ==================== Testes: camadas ====================


@pytest.mark.unit
class TestLayers:
    """Testes da precedência de camadas"""

    def test_last_layer_wins(self):
        merged = merge_layers([
            ConfigLayer("preset", {"a": 1, "b": 1}),
            ConfigLayer("generated", {"b": 2, "c": 2}),
            ConfigLayer("node", {"c": 3}),
        ])

        assert merged == {"a": 1, "b": 2, "c": 3}

    def test_entity_context_layer_lookup(self):
        context = EntityContext("n", (ConfigLayer("preset", {"a": 1}),))

        assert context.layer("preset").values == {"a": 1}
        assert context.layer("node") is None

    def test_node_context(self, preset_factory, network_type):
        preset = preset_factory(maxTransactionsPerBlock=100)
        account = _node_account(network_type, "api-node", NodeType.API_NODE)
        context = resolve_node_context(preset, account, preset.nodes[0])
        values = context.values

        assert values["name"] == "api-node"
        assert values["type"] == "api-node"
        assert values["harvesterSigningPrivateKey"] == account.signing.private_key
        assert values["harvesterVrfPrivateKey"] == account.vrf.private_key
        assert values["databaseHost"] == "db"
        assert values["maxTransactionsPerBlock"] == 100
        assert [layer.name for layer in context.layers] == ["preset", "generated", "node"]


# ==================== Testes: peers ====================


@pytest.mark.unit
class TestKnownPeers:
    """Testes dos descritores de peers por papel"""

    def test_peers_by_role(self, preset_factory, network_type):
        static_peer = {"publicKey": "AB" * 32, "endpoint": {"host": "remote", "port": 7900}}
        preset = preset_factory(
            nodes=[
                {"name": "peer-node-0", "type": "peer-node", "roles": "Peer"},
                {"name": "api-node", "type": "api-node", "roles": "Peer,Api"},
            ],
            knownPeers={"peer-node": [static_peer]},
        )
        peer = _node_account(network_type, "peer-node-0")
        api = _node_account(network_type, "api-node", NodeType.API_NODE)
        addresses = Addresses(network_type, "00" * 32, nodes=(peer, api))

        p2p = build_known_peers(preset, addresses, NodeType.PEER_NODE)
        api_peers = build_known_peers(preset, addresses, NodeType.API_NODE)

        assert p2p["_info"] == "this file contains a list of peer-node peers"
        assert p2p["knownPeers"][0] == {
            "publicKey": peer.ssl.public_key,
            "endpoint": {"host": "peer-node-0", "port": 7900},
            "metadata": {"name": "peer-node-0", "roles": "Peer"},
        }
        assert p2p["knownPeers"][1] == static_peer
        assert [p["metadata"]["name"] for p in api_peers["knownPeers"]] == ["api-node"]


# ==================== Testes: complete_preset ====================


@pytest.mark.unit
class TestCompletePreset:
    """Testes dos valores derivados do preset"""

    def _addresses(self, network_type):
        return Addresses(network_type, "AA" * 32)

    def test_single_mosaic(self, preset_factory, network_type):
        signer = generate_account(network_type)
        preset = preset_factory(nemesisSignerPublicKey=signer.public_key)
        completed = ConfigService.complete_preset(preset, self._addresses(network_type))

        owner = derive_address(signer.public_key, network_type)
        assert completed.currency_mosaic_id == to_hex_id(derive_mosaic_id(0, owner))
        assert completed.harvesting_mosaic_id == completed.currency_mosaic_id
        assert completed.network_identifier == "public-test"
        assert completed.network_name == "publicTest"
        assert completed.nemesis_generation_hash_seed == "AA" * 32

    def test_two_mosaics(self, preset_factory, network_type):
        signer = generate_account(network_type)
        preset = preset_factory(
            nemesisSignerPublicKey=signer.public_key,
            nemesis={"mosaics": [
                {"name": "cat.currency", "supply": 1000},
                {"name": "cat.harvest", "supply": 10},
            ]},
        )
        completed = ConfigService.complete_preset(preset, self._addresses(network_type))

        owner = derive_address(signer.public_key, network_type)
        assert completed.harvesting_mosaic_id == to_hex_id(derive_mosaic_id(1, owner))
        assert completed.harvesting_mosaic_id != completed.currency_mosaic_id

    def test_explicit_ids_are_kept(self, preset_factory, network_type):
        preset = preset_factory(currencyMosaicId="0x1", harvestingMosaicId="0x2", nemesisGenerationHashSeed="BB" * 32)
        completed = ConfigService.complete_preset(preset, self._addresses(network_type))

        assert completed.currency_mosaic_id == "0x1"
        assert completed.harvesting_mosaic_id == "0x2"
        assert completed.nemesis_generation_hash_seed == "BB" * 32

    def test_missing_signer(self, preset_factory, network_type):
        with pytest.raises(MissingPrerequisiteError):
            ConfigService.complete_preset(preset_factory(), self._addresses(network_type))


# ==================== Testes: ConfigService.run ====================


@pytest.mark.unit
class TestConfigService:
    """Testes da geração completa de um target"""

    @pytest.mark.asyncio
    async def test_generate_addresses(self, run_context, genesis_builder, preset_factory):
        service = _service(run_context, genesis_builder)
        preset = preset_factory(nodes=[
            {"type": "peer-node"},
            {"name": "api-node", "type": "api-node", "friendlyName": "my-api"},
        ])
        addresses, updated = await service.generate_addresses(preset)

        assert [n.name for n in addresses.nodes] == ["peer-node-0", "api-node"]
        assert addresses.nodes[0].friendly_name == addresses.nodes[0].ssl.public_key[:7]
        assert addresses.nodes[1].friendly_name == "my-api"
        assert [n.name for n in updated.nodes] == ["peer-node-0", "api-node"]
        assert updated.nemesis.nemesis_signer_private_key == addresses.nemesis_signer.private_key
        assert updated.nemesis_signer_public_key == addresses.nemesis_signer.public_key

        # 2 contas geradas + 2 nós
        currency = updated.nemesis.currency_mosaic
        assert len(addresses.mosaics["cat.currency"]) == 2
        assert len(currency.currency_distributions) == 4
        assert total_supplied(currency.currency_distributions) == currency.supply
        assert currency.currency_distributions[2].address == addresses.nodes[0].signing.address

    @pytest.mark.asyncio
    async def test_custom_certificate_provider(self, run_context, genesis_builder, preset_factory, network_type):
        class RecordingProvider:
            def __init__(self):
                self.issued = {}

            async def issue(self, name):
                self.issued[name] = generate_account(network_type)
                return self.issued[name]

        provider = RecordingProvider()
        service = ConfigService(
            run_context,
            ConfigParams(preset=Preset.LIGHT),
            certificates=provider,
            genesis=GenesisAssembler(run_context, builder=genesis_builder),
        )
        addresses, _ = await service.generate_addresses(preset_factory())

        assert set(provider.issued) == {n.name for n in addresses.nodes}
        for node in addresses.nodes:
            assert node.ssl == provider.issued[node.name]

    @pytest.mark.asyncio
    async def test_provided_signer_key(self, run_context, genesis_builder, preset_factory, network_type):
        signer = generate_account(network_type)
        preset = preset_factory(nemesis={
            "nemesisSignerPrivateKey": signer.private_key,
            "mosaics": [{"name": "cat.currency", "supply": 10, "accounts": 1}],
        })
        addresses, updated = await _service(run_context, genesis_builder).generate_addresses(preset)

        assert addresses.nemesis_signer == signer
        assert updated.nemesis_signer_public_key == signer.public_key

    @pytest.mark.asyncio
    async def test_logs_name_each_entity(self, run_context, genesis_builder, caplog):
        with caplog.at_level(logging.INFO, logger="fogbed_symbol"):
            result = await _service(run_context, genesis_builder).run()

        entities = {getattr(r, "entity", None) for r in caplog.records}
        for node in result.addresses.nodes:
            assert node.name in entities
        for gateway in result.preset.gateways:
            assert gateway.name in entities

    @pytest.mark.asyncio
    async def test_run_light_preset(self, run_context, genesis_builder):
        result = await _service(run_context, genesis_builder).run()
        working_dir = run_context.working_dir
        preset = result.preset
        seed = preset.nemesis_generation_hash_seed

        assert run_context.addresses_file.exists()
        assert run_context.preset_file.exists()
        assert len(genesis_builder.calls) == 1

        # nó
        resources = working_dir / "api-node" / "userconfig" / "resources"
        node_properties = (resources / "config-node.properties").read_text()
        assert "host = api-node" in node_properties
        assert f"friendlyName = {result.addresses.nodes[0].friendly_name}" in node_properties
        harvesting = (resources / "config-harvesting.properties").read_text()
        assert result.addresses.nodes[0].signing.private_key in harvesting
        assert "enableAutoHarvesting = true" in harvesting
        network = (resources / "config-network.properties").read_text()
        assert f"currencyMosaicId = {preset.currency_mosaic_id}" in network
        assert f"generationHashSeed = {seed}" in network
        assert (resources / "config-logging-server.properties").exists()

        api_peers = json.loads((resources / "peers-api.json").read_text())
        p2p_peers = json.loads((resources / "peers-p2p.json").read_text())
        assert [p["endpoint"]["host"] for p in api_peers["knownPeers"]] == ["api-node"]
        assert p2p_peers["knownPeers"] == []

        # genesis
        vrf_file = run_context.nemesis_dir / "transactions" / "vrf_api-node.bin"
        assert verify_signature(vrf_file.read_bytes(), seed)
        block_properties = (run_context.nemesis_dir / "userconfig" / "block-properties-file.properties").read_text()
        assert "transactionsDirectory = /nemesis/transactions" in block_properties
        for distribution in preset.nemesis.currency_mosaic.currency_distributions:
            assert f"{distribution.address} = {distribution.amount}" in block_properties
        assert (working_dir / "api-node" / "data" / "00000" / "00001.dat").exists()

        # gateway
        rest = json.loads((working_dir / "rest-gateway" / "rest.json").read_text())
        assert rest["restPrivateKey"] == result.addresses.gateways[0].private_key
        assert rest["apiNode"]["host"] == "api-node"
        assert (working_dir / "rest-gateway" / "api-node-config" / "config-network.properties").exists()

    @pytest.mark.asyncio
    async def test_supply_conserved(self, run_context, genesis_builder):
        params = ConfigParams(preset=Preset.BOOTSTRAP)
        result = await _service(run_context, genesis_builder, params).run()

        for mosaic in result.preset.nemesis.mosaics:
            assert total_supplied(mosaic.currency_distributions) == mosaic.supply
        assert result.preset.harvesting_mosaic_id != result.preset.currency_mosaic_id

    @pytest.mark.asyncio
    async def test_second_run_is_skipped(self, run_context, genesis_builder):
        first = await _service(run_context, genesis_builder).run()
        addresses_before = run_context.addresses_file.read_bytes()

        second = await _service(run_context, genesis_builder).run()

        assert run_context.addresses_file.read_bytes() == addresses_before
        assert len(genesis_builder.calls) == 1
        assert second.preset.nemesis_generation_hash_seed == first.preset.nemesis_generation_hash_seed
        assert [n.name for n in second.addresses.nodes] == [n.name for n in first.addresses.nodes]

    @pytest.mark.asyncio
    async def test_reset_regenerates(self, run_context, genesis_builder, tmp_path):
        first = await _service(run_context, genesis_builder).run()
        context = RunContext(target=run_context.target, reset=True)

        second = await _service(context, genesis_builder).run()

        assert len(genesis_builder.calls) == 2
        assert second.addresses.nemesis_signer != first.addresses.nemesis_signer

    @pytest.mark.asyncio
    async def test_opt_in(self, run_context, genesis_builder, tmp_path, network_type):
        seed = generate_account(network_type).public_key
        opted_in = generate_account(network_type).address
        signer = generate_account(network_type)
        payload = create_vrf_key_link(signer, generate_account(network_type).public_key, network_type, seed)
        other = create_vrf_key_link(signer, generate_account(network_type).public_key, network_type, seed)
        custom = tmp_path / "custom.yml"
        custom.write_text(yaml.safe_dump({
            "nemesisGenerationHashSeed": seed,
            "nemesis": {
                "balances": {opted_in: 1000},
                "transactions": {"optin_a": payload.hex(), "optin_b": other.hex(), "optin_c": payload.hex()},
            },
        }))
        params = ConfigParams(preset=Preset.LIGHT, custom_preset=custom)

        result = await _service(run_context, genesis_builder, params).run()

        currency = result.preset.nemesis.currency_mosaic
        assert currency.currency_distributions[-1].address == opted_in
        assert currency.currency_distributions[-1].amount == 1000
        assert total_supplied(currency.currency_distributions) == currency.supply

        transactions = run_context.nemesis_dir / "transactions"
        assert (transactions / "optin_a.bin").exists()
        assert (transactions / "optin_b.bin").exists()
        assert not (transactions / "optin_c.bin").exists()
