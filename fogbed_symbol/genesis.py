# fogbed_symbol/genesis.py

"""
Montagem do genesis (nemesis)

- transações VRF key link assinadas por nó (deadline fixo, reprodutíveis);
- transações de opt-in externas, deduplicadas por hash de conteúdo;
- ajuste de opt-in do token principal (saldos externos);
- renderização da configuração do nemgen e execução do builder externo;
- cópia da seed gerada para a pasta de dados de cada nó.
"""

import asyncio
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Mapping, Optional, Protocol

from fogbed_symbol import supply
from fogbed_symbol.context import RunContext
from fogbed_symbol.exceptions import InvalidPresetError, MissingPrerequisiteError
from fogbed_symbol.models import Addresses, ConfigPreset, NodeAccount
from fogbed_symbol.transactions import create_vrf_key_link, parse_header, transaction_hash
from fogbed_symbol.utils import generate_configuration, mkdir, run_command, write_binary

NEMGEN_BINARY = "/usr/catapult/bin/catapult.tools.nemgen"
CONTAINER_NEMESIS_DIR = "/nemesis"


class GenesisBlockBuilder(Protocol):
    """Ferramenta externa que consome userconfig + transações e gera a seed"""

    async def build(self, preset: ConfigPreset, nemesis_dir: Path) -> None:
        ...


class NemgenBuilder:
    """Executa o nemgen dentro da imagem do servidor"""

    def __init__(self, user: Optional[str] = None):
        self.user = user

    def command(self, preset: ConfigPreset, nemesis_dir: Path) -> List[str]:
        if not preset.symbol_server_image:
            raise MissingPrerequisiteError("symbolServerImage must be defined to run nemgen")
        cmd = ["docker", "run", "--rm"]
        if self.user:
            cmd += ["--user", self.user]
        cmd += [
            "-v", f"{Path(nemesis_dir).resolve()}:{CONTAINER_NEMESIS_DIR}",
            "-w", CONTAINER_NEMESIS_DIR,
            preset.symbol_server_image,
            NEMGEN_BINARY,
            "--resources", f"{CONTAINER_NEMESIS_DIR}/userconfig",
            "--nemesisProperties", f"{CONTAINER_NEMESIS_DIR}/userconfig/block-properties-file.properties",
        ]
        return cmd

    async def build(self, preset: ConfigPreset, nemesis_dir: Path) -> None:
        await run_command(self.command(preset, nemesis_dir))


@dataclass
class GenesisResult:
    nemesis_dir: Path
    transactions_directory: Optional[Path] = None
    vrf_transactions: List[Path] = field(default_factory=list)
    opted_in_transactions: List[str] = field(default_factory=list)


class GenesisAssembler:
    def __init__(self, context: RunContext, builder: Optional[GenesisBlockBuilder] = None):
        self.context = context
        self.logger = context.logger
        self.builder = builder or NemgenBuilder()

    # ---------- Opt-in ----------

    def apply_opt_in(self, preset: ConfigPreset) -> ConfigPreset:
        """
        Aplica os saldos de opt-in ao token principal

        Transações de opt-in não alteram o supply; são apenas gravadas e contadas.

        Returns:
            ConfigPreset: novo preset (ou o mesmo, sem opt-in)
        """
        nemesis = preset.nemesis
        if not nemesis or not nemesis.opt_in:
            return preset

        self.logger.info("Opt In mode is ON!!! balances or transactions have been provided")
        if not nemesis.balances:
            return preset

        # saldos sem token principal não podem ser absorvidos
        currency = nemesis.currency_mosaic
        if currency is None:
            raise MissingPrerequisiteError("Currency mosaic could not be found for opt in balances")
        if not currency.currency_distributions:
            raise MissingPrerequisiteError(
                f"Residual account could not be found for opt in of {currency.name}"
            )
        distributions = supply.apply_opt_in(
            currency.currency_distributions,
            nemesis.balances,
            currency.supply,
            name=currency.name,
        )
        mosaics = (replace(currency, currency_distributions=distributions),) + tuple(nemesis.mosaics[1:])
        return replace(preset, nemesis=replace(nemesis, mosaics=mosaics))

    # ---------- Transações ----------

    def transactions_directory(self, preset: ConfigPreset) -> Path:
        name = (preset.nemesis.transactions_directory if preset.nemesis else None) or preset.transactions_directory
        return self.context.nemesis_dir / name

    def store_transaction(self, directory: Path, name: str, payload) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise InvalidPresetError(f"Invalid transaction name: {name!r}")
        data = bytes.fromhex(payload) if isinstance(payload, str) else bytes(payload)
        parse_header(data)
        return write_binary(Path(directory) / f"{name}.bin", data)

    def store_transactions(
        self, directory: Path, transactions: Mapping[str, str], generation_hash_seed: str
    ) -> List[str]:
        """
        Grava um lote de transações pulando hashes repetidos

        Returns:
            list: chaves aceitas, na ordem do lote
        """
        accepted: List[str] = []
        hashes = set()
        for key, payload in transactions.items():
            tx_hash = transaction_hash(payload, generation_hash_seed)
            if tx_hash in hashes:
                self.logger.warning(f"Transaction {key} with hash {tx_hash} already exist. Excluded from folder.")
                continue
            hashes.add(tx_hash)
            self.store_transaction(directory, key, payload)
            accepted.append(key)
        return accepted

    async def create_vrf_transaction(self, directory: Path, preset: ConfigPreset, node: NodeAccount) -> Path:
        payload = create_vrf_key_link(
            node.signing,
            node.vrf.public_key,
            preset.network_type,
            preset.nemesis_generation_hash_seed,
        )
        return await asyncio.to_thread(self.store_transaction, directory, f"vrf_{node.name}", payload)

    # ---------- Nemesis ----------

    async def run(self, preset: ConfigPreset, addresses: Addresses) -> GenesisResult:
        nemesis_dir = self.context.nemesis_dir
        mkdir(nemesis_dir / "seed" / "00000")

        if preset.nemesis:
            result = await self.generate_nemesis_config(preset, addresses)
        else:
            if not preset.nemesis_seed_folder:
                raise MissingPrerequisiteError("nemesis or nemesisSeedFolder must be defined!")
            self.logger.info(f"Using nemesis seed from {preset.nemesis_seed_folder}")
            await generate_configuration({}, preset.nemesis_seed_folder, nemesis_dir / "seed")
            result = GenesisResult(nemesis_dir=nemesis_dir)

        await asyncio.gather(*[self.copy_to_node(account.name) for account in addresses.nodes])
        return result

    async def copy_to_node(self, name: str) -> None:
        data_folder = self.context.working_dir / name / "data"
        mkdir(data_folder)
        for folder in ("seed", "data"):
            source = self.context.nemesis_dir / folder
            if source.exists():
                await generate_configuration({}, source, data_folder)

    async def generate_nemesis_config(self, preset: ConfigPreset, addresses: Addresses) -> GenesisResult:
        if not preset.nemesis:
            raise MissingPrerequisiteError("nemesis must be defined!")
        if not preset.nemesis_generation_hash_seed:
            raise MissingPrerequisiteError("nemesisGenerationHashSeed must be resolved before genesis")

        nemesis_dir = self.context.nemesis_dir
        directory = mkdir(self.transactions_directory(preset))

        vrf_files = await asyncio.gather(*[
            self.create_vrf_transaction(directory, preset, node) for node in addresses.nodes
        ])

        opted_in: List[str] = []
        if preset.nemesis.mosaics and preset.nemesis.transactions:
            opted_in = self.store_transactions(
                directory, preset.nemesis.transactions, preset.nemesis_generation_hash_seed
            )
            self.logger.info(f"Found {len(opted_in)} opted in transactions.")

        template_context = {
            **preset.to_dict(),
            "addresses": addresses.to_dict(),
            "transactionsPath": f"{CONTAINER_NEMESIS_DIR}/{directory.name}",
        }
        await generate_configuration(template_context, self.context.templates("nemesis"), nemesis_dir / "userconfig")
        await self.builder.build(preset, nemesis_dir)

        self.logger.info(f"✅ Nemesis generated ({len(vrf_files)} VRF links)")
        return GenesisResult(
            nemesis_dir=nemesis_dir,
            transactions_directory=directory,
            vrf_transactions=list(vrf_files),
            opted_in_transactions=opted_in,
        )
