# fogbed_symbol/certificates.py

"""
Identidade de certificado dos nós

A emissão de certificados X.509 fica fora deste pacote; aqui só existe a
interface e uma implementação que gera a identidade (keypair) do nó.
"""

from typing import Protocol

from fogbed_symbol.identity import Account, NetworkType, generate_account
from fogbed_symbol.utils import get_logger

logger = get_logger("certificates")


class CertificateProvider(Protocol):
    async def issue(self, name: str) -> Account:
        ...


class GeneratedCertificateProvider:
    """Gera uma identidade Ed25519 nova para cada nó"""

    def __init__(self, network_type: NetworkType):
        self.network_type = network_type

    async def issue(self, name: str) -> Account:
        account = generate_account(self.network_type)
        logger.debug(f"Certificate identity for {name}: {account.public_key[:16]}...")
        return account
