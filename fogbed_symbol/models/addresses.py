# fogbed_symbol/models/addresses.py

"""
Registro de identidades geradas (addresses.yml)

Gerado uma vez por target e reaproveitado nas execuções sem reset.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from fogbed_symbol.identity import Account, NetworkType
from fogbed_symbol.models.preset import NodeType


@dataclass(frozen=True)
class NodeAccount:
    """
    Identidades de um nó

    Attributes:
        signing: Conta de assinatura (harvesting)
        vrf: Conta VRF vinculada no genesis
        ssl: Identidade do certificado do nó (chave pública usada nos peers)
        type: Classe de papel
        name: Nome do nó
        friendly_name: Nome exibido
    """

    signing: Account
    vrf: Account
    ssl: Account
    type: NodeType
    name: str
    friendly_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signing": self.signing.to_dict(),
            "vrf": self.vrf.to_dict(),
            "ssl": self.ssl.to_dict(),
            "type": str(self.type),
            "name": self.name,
            "friendlyName": self.friendly_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeAccount":
        return cls(
            signing=Account.from_dict(data["signing"]),
            vrf=Account.from_dict(data["vrf"]),
            ssl=Account.from_dict(data["ssl"]),
            type=NodeType(data["type"]),
            name=data["name"],
            friendly_name=data["friendlyName"],
        )


@dataclass(frozen=True)
class Addresses:
    """Saída completa de identidades geradas numa execução"""

    network_type: NetworkType
    nemesis_generation_hash_seed: str
    nodes: Tuple[NodeAccount, ...] = ()
    gateways: Tuple[Account, ...] = ()
    nemesis_signer: Optional[Account] = None
    mosaics: Dict[str, Tuple[Account, ...]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "networkType": int(self.network_type),
            "nemesisGenerationHashSeed": self.nemesis_generation_hash_seed,
        }
        if self.nodes:
            data["nodes"] = [n.to_dict() for n in self.nodes]
        if self.gateways:
            data["gateways"] = [g.to_dict() for g in self.gateways]
        if self.nemesis_signer:
            data["nemesisSigner"] = self.nemesis_signer.to_dict()
        if self.mosaics:
            data["mosaics"] = {
                name: [a.to_dict() for a in accounts] for name, accounts in self.mosaics.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Addresses":
        signer = data.get("nemesisSigner")
        return cls(
            network_type=NetworkType.parse(data["networkType"]),
            nemesis_generation_hash_seed=data["nemesisGenerationHashSeed"],
            nodes=tuple(NodeAccount.from_dict(n) for n in data.get("nodes") or []),
            gateways=tuple(Account.from_dict(g) for g in data.get("gateways") or []),
            nemesis_signer=Account.from_dict(signer) if signer else None,
            mosaics={
                name: tuple(Account.from_dict(a) for a in accounts or [])
                for name, accounts in (data.get("mosaics") or {}).items()
            },
        )
