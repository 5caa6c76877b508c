# fogbed_symbol/models/preset.py

"""
Modelo de dados do preset (descrição declarativa da rede)

Campos conhecidos viram atributos tipados; qualquer outra chave do documento
fica em `settings` e volta intacta em `to_dict()` (os templates dependem dela).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from fogbed_symbol.identity import NetworkType
from fogbed_symbol.utils import get_logger

logger = get_logger("models.preset")

OpenPort = Optional[Union[bool, int, str]]


class NodeType(Enum):
    """Classe de papel do nó (define o arquivo de peers em que aparece)"""

    PEER_NODE = "peer-node"
    API_NODE = "api-node"

    def __str__(self):
        return self.value


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Remove chaves com valor None"""
    return {k: v for k, v in data.items() if v is not None}


def _rest(data: Dict[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


@dataclass(frozen=True)
class TokenDistribution:
    address: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenDistribution":
        return cls(address=data["address"], amount=int(data["amount"]))


@dataclass(frozen=True)
class MosaicPreset:
    """
    Definição de token do nemesis

    Attributes:
        name: Nome do token
        supply: Supply total declarado
        accounts: Quantidade de contas beneficiárias a gerar
        currency_distributions: Distribuição explícita (ou calculada)
    """

    name: str
    supply: int
    accounts: int = 0
    currency_distributions: Optional[Tuple[TokenDistribution, ...]] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = ("name", "supply", "accounts", "currencyDistributions")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            **self.settings,
            "name": self.name,
            "supply": self.supply,
            "accounts": self.accounts,
        }
        if self.currency_distributions is not None:
            data["currencyDistributions"] = [d.to_dict() for d in self.currency_distributions]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MosaicPreset":
        distributions = data.get("currencyDistributions")
        return cls(
            name=data["name"],
            supply=int(data["supply"]),
            accounts=int(data.get("accounts") or 0),
            currency_distributions=(
                tuple(TokenDistribution.from_dict(d) for d in distributions)
                if distributions is not None
                else None
            ),
            settings=_rest(data, cls.KEYS),
        )


@dataclass(frozen=True)
class NemesisPreset:
    """
    Definição do bloco nemesis

    `balances` e `transactions` são os dados de opt-in fornecidos externamente.
    """

    mosaics: Tuple[MosaicPreset, ...] = ()
    balances: Dict[str, int] = field(default_factory=dict)
    transactions: Dict[str, str] = field(default_factory=dict)
    nemesis_signer_private_key: Optional[str] = None
    transactions_directory: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = ("mosaics", "balances", "transactions", "nemesisSignerPrivateKey", "transactionsDirectory")

    @property
    def currency_mosaic(self) -> Optional[MosaicPreset]:
        return self.mosaics[0] if self.mosaics else None

    @property
    def opt_in(self) -> bool:
        """Há dados de opt-in, com ou sem mosaicos definidos"""
        return bool(self.balances or self.transactions)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            **self.settings,
            "mosaics": [m.to_dict() for m in self.mosaics],
            "nemesisSignerPrivateKey": self.nemesis_signer_private_key,
            "transactionsDirectory": self.transactions_directory,
        }
        if self.balances:
            data["balances"] = dict(self.balances)
        if self.transactions:
            data["transactions"] = dict(self.transactions)
        return _compact(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NemesisPreset":
        return cls(
            mosaics=tuple(MosaicPreset.from_dict(m) for m in data.get("mosaics") or []),
            balances={k: int(v) for k, v in (data.get("balances") or {}).items()},
            transactions=dict(data.get("transactions") or {}),
            nemesis_signer_private_key=data.get("nemesisSignerPrivateKey"),
            transactions_directory=data.get("transactionsDirectory"),
            settings=_rest(data, cls.KEYS),
        )


@dataclass(frozen=True)
class NodePreset:
    """
    Nó do preset

    Attributes:
        name: Nome do nó/container (opcional, fallback `<type>-<index>`)
        type: Classe de papel (peer ou api)
        friendly_name: Nome exibido (fallback derivado da chave pública)
        roles: Papéis declarados (ex: "Peer,Api")
        open_port: Exposição da porta 7900
        open_broker_port: Exposição da porta 7902 do broker
        database_host: Serviço de banco do qual depende
        broker_host: Nome do serviço broker companheiro
    """

    name: Optional[str] = None
    type: NodeType = NodeType.PEER_NODE
    friendly_name: Optional[str] = None
    roles: Optional[str] = None
    open_port: OpenPort = None
    open_broker_port: OpenPort = None
    database_host: Optional[str] = None
    broker_host: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = (
        "name", "type", "friendlyName", "roles", "openPort",
        "openBrokerPort", "databaseHost", "brokerHost",
    )

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            **self.settings,
            "name": self.name,
            "type": str(self.type),
            "friendlyName": self.friendly_name,
            "roles": self.roles,
            "openPort": self.open_port,
            "openBrokerPort": self.open_broker_port,
            "databaseHost": self.database_host,
            "brokerHost": self.broker_host,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodePreset":
        node_type = data.get("type", NodeType.PEER_NODE)
        if not isinstance(node_type, NodeType):
            try:
                node_type = NodeType(node_type)
            except ValueError:
                raise ValueError(f"Invalid node type: {node_type}") from None
        return cls(
            name=data.get("name"),
            type=node_type,
            friendly_name=data.get("friendlyName"),
            roles=data.get("roles"),
            open_port=data.get("openPort"),
            open_broker_port=data.get("openBrokerPort"),
            database_host=data.get("databaseHost"),
            broker_host=data.get("brokerHost"),
            settings=_rest(data, cls.KEYS),
        )


@dataclass(frozen=True)
class DatabasePreset:
    name: str
    open_port: OpenPort = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = ("name", "openPort")

    def to_dict(self) -> Dict[str, Any]:
        return _compact({**self.settings, "name": self.name, "openPort": self.open_port})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabasePreset":
        return cls(name=data["name"], open_port=data.get("openPort"), settings=_rest(data, cls.KEYS))


@dataclass(frozen=True)
class GatewayPreset:
    name: Optional[str] = None
    api_node_name: Optional[str] = None
    database_host: Optional[str] = None
    open_port: OpenPort = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = ("name", "apiNodeName", "databaseHost", "openPort")

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            **self.settings,
            "name": self.name,
            "apiNodeName": self.api_node_name,
            "databaseHost": self.database_host,
            "openPort": self.open_port,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayPreset":
        return cls(
            name=data.get("name"),
            api_node_name=data.get("apiNodeName"),
            database_host=data.get("databaseHost"),
            open_port=data.get("openPort"),
            settings=_rest(data, cls.KEYS),
        )


@dataclass(frozen=True)
class ConfigPreset:
    """
    Preset completo

    Instâncias são imutáveis: cada fase de backfill devolve um novo objeto
    (`dataclasses.replace`), e as fases concorrentes apenas leem.
    """

    network_type: NetworkType
    nodes: Tuple[NodePreset, ...] = ()
    databases: Tuple[DatabasePreset, ...] = ()
    gateways: Tuple[GatewayPreset, ...] = ()
    nemesis: Optional[NemesisPreset] = None
    known_peers: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    nemesis_generation_hash_seed: Optional[str] = None
    nemesis_signer_public_key: Optional[str] = None
    currency_mosaic_id: Optional[str] = None
    harvesting_mosaic_id: Optional[str] = None
    network_identifier: Optional[str] = None
    network_name: Optional[str] = None
    transactions_directory: str = "transactions"
    nemesis_seed_folder: Optional[str] = None
    symbol_server_image: Optional[str] = None
    symbol_rest_image: Optional[str] = None
    mongo_image: Optional[str] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    KEYS = (
        "networkType", "nodes", "databases", "gateways", "nemesis", "knownPeers",
        "nemesisGenerationHashSeed", "nemesisSignerPublicKey", "currencyMosaicId",
        "harvestingMosaicId", "networkIdentifier", "networkName", "transactionsDirectory",
        "nemesisSeedFolder", "symbolServerImage", "symbolRestImage", "mongoImage",
    )

    def known_peers_for(self, node_type: NodeType) -> List[Dict[str, Any]]:
        return list(self.known_peers.get(str(node_type)) or [])

    def to_dict(self) -> Dict[str, Any]:
        data = {
            **self.settings,
            "networkType": int(self.network_type),
            "networkIdentifier": self.network_identifier,
            "networkName": self.network_name,
            "nemesisGenerationHashSeed": self.nemesis_generation_hash_seed,
            "nemesisSignerPublicKey": self.nemesis_signer_public_key,
            "currencyMosaicId": self.currency_mosaic_id,
            "harvestingMosaicId": self.harvesting_mosaic_id,
            "transactionsDirectory": self.transactions_directory,
            "nemesisSeedFolder": self.nemesis_seed_folder,
            "symbolServerImage": self.symbol_server_image,
            "symbolRestImage": self.symbol_rest_image,
            "mongoImage": self.mongo_image,
            "knownPeers": self.known_peers or None,
            "nodes": [n.to_dict() for n in self.nodes],
            "databases": [d.to_dict() for d in self.databases],
            "gateways": [g.to_dict() for g in self.gateways],
            "nemesis": self.nemesis.to_dict() if self.nemesis else None,
        }
        return _compact(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigPreset":
        logger.debug(f"Creating ConfigPreset from dict ({len(data)} keys)")
        if "networkType" not in data:
            raise ValueError("Preset does not define networkType")
        nemesis = data.get("nemesis")
        return cls(
            network_type=NetworkType.parse(data["networkType"]),
            nodes=tuple(NodePreset.from_dict(n) for n in data.get("nodes") or []),
            databases=tuple(DatabasePreset.from_dict(d) for d in data.get("databases") or []),
            gateways=tuple(GatewayPreset.from_dict(g) for g in data.get("gateways") or []),
            nemesis=NemesisPreset.from_dict(nemesis) if nemesis else None,
            known_peers={k: list(v or []) for k, v in (data.get("knownPeers") or {}).items()},
            nemesis_generation_hash_seed=data.get("nemesisGenerationHashSeed"),
            nemesis_signer_public_key=data.get("nemesisSignerPublicKey"),
            currency_mosaic_id=data.get("currencyMosaicId"),
            harvesting_mosaic_id=data.get("harvestingMosaicId"),
            network_identifier=data.get("networkIdentifier"),
            network_name=data.get("networkName"),
            transactions_directory=data.get("transactionsDirectory") or "transactions",
            nemesis_seed_folder=data.get("nemesisSeedFolder"),
            symbol_server_image=data.get("symbolServerImage"),
            symbol_rest_image=data.get("symbolRestImage"),
            mongo_image=data.get("mongoImage"),
            settings=_rest(data, cls.KEYS),
        )
