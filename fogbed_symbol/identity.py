# fogbed_symbol/identity.py

"""
Geração de identidades (keypairs Ed25519) e derivação de endereços

Endereço: base32(network byte || ripemd160(sha3_256(public key)) || checksum),
onde o checksum são os 3 primeiros bytes de sha3_256 sobre os 21 bytes
anteriores. Ids de mosaico derivam de (nonce, endereço do dono).
"""

import base64
import hashlib
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from Crypto.Hash import RIPEMD160

from fogbed_symbol.exceptions import InvalidNetworkTypeError

ADDRESS_DECODED_SIZE = 24
ADDRESS_ENCODED_SIZE = 39
CHECKSUM_SIZE = 3
KEY_SIZE = 32


class NetworkType(IntEnum):
    """Variantes de rede; o valor é o byte de rede usado nos endereços"""

    MAIN_NET = 104
    TEST_NET = 152
    PRIVATE = 96
    PRIVATE_TEST = 144

    @property
    def identifier(self) -> str:
        return _IDENTIFIERS[self]

    @property
    def network_name(self) -> str:
        return _NETWORK_NAMES[self]

    @classmethod
    def parse(cls, value: Union["NetworkType", int, str]) -> "NetworkType":
        """
        Aceita o byte numérico, o nome do enum ou o identificador

        Raises:
            InvalidNetworkTypeError: para qualquer outro valor
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidNetworkTypeError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidNetworkTypeError(value) from None
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            normalized = text.upper().replace('-', '_')
            if normalized in cls.__members__:
                return cls[normalized]
            for network_type, identifier in _IDENTIFIERS.items():
                if text.lower() == identifier:
                    return network_type
        raise InvalidNetworkTypeError(value)


_IDENTIFIERS = {
    NetworkType.MAIN_NET: 'public',
    NetworkType.TEST_NET: 'public-test',
    NetworkType.PRIVATE: 'private',
    NetworkType.PRIVATE_TEST: 'private-test',
}

_NETWORK_NAMES = {
    NetworkType.MAIN_NET: 'public',
    NetworkType.TEST_NET: 'publicTest',
    NetworkType.PRIVATE: 'private',
    NetworkType.PRIVATE_TEST: 'privateTest',
}


@dataclass(frozen=True)
class Account:
    """Conta gerada: chave privada (seed de 32 bytes), chave pública e endereço"""

    private_key: str
    public_key: str
    address: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "privateKey": self.private_key,
            "publicKey": self.public_key,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            private_key=data["privateKey"],
            public_key=data["publicKey"],
            address=data["address"],
        )

    def __repr__(self):
        return f"Account(address='{self.address}')"


def _public_key_bytes(private_key: Ed25519PrivateKey) -> bytes:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def _account_from_key(private_key: Ed25519PrivateKey, network_type: NetworkType) -> Account:
    seed = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_key = _public_key_bytes(private_key).hex().upper()
    return Account(
        private_key=seed.hex().upper(),
        public_key=public_key,
        address=derive_address(public_key, network_type),
    )


def generate_account(network_type: Union[NetworkType, int, str]) -> Account:
    """Nova conta aleatória (CSPRNG do sistema operacional)"""
    network_type = NetworkType.parse(network_type)
    return _account_from_key(Ed25519PrivateKey.generate(), network_type)


def generate_accounts(network_type: Union[NetworkType, int, str], size: int) -> List[Account]:
    network_type = NetworkType.parse(network_type)
    return [generate_account(network_type) for _ in range(size or 0)]


def account_from_private_key(private_key: str, network_type: Union[NetworkType, int, str]) -> Account:
    """Reconstrói a conta a partir da seed hexadecimal"""
    network_type = NetworkType.parse(network_type)
    seed = bytes.fromhex(private_key)
    if len(seed) != KEY_SIZE:
        raise ValueError(f"Private key must have {KEY_SIZE} bytes, got {len(seed)}")
    return _account_from_key(Ed25519PrivateKey.from_private_bytes(seed), network_type)


def load_private_key(private_key: str) -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(private_key))


def derive_address(public_key: str, network_type: Union[NetworkType, int, str]) -> str:
    network_type = NetworkType.parse(network_type)
    public_key_bytes = bytes.fromhex(public_key)
    if len(public_key_bytes) != KEY_SIZE:
        raise ValueError(f"Public key must have {KEY_SIZE} bytes, got {len(public_key_bytes)}")

    key_hash = hashlib.sha3_256(public_key_bytes).digest()
    ripe = RIPEMD160.new(key_hash).digest()
    version_prefixed = bytes([int(network_type)]) + ripe
    checksum = hashlib.sha3_256(version_prefixed).digest()[:CHECKSUM_SIZE]
    return base64.b32encode(version_prefixed + checksum).decode().rstrip('=')


def decode_address(address: str) -> bytes:
    """
    Decodifica endereço base32 (aceita o formato com hífens)

    Raises:
        ValueError: tamanho ou checksum inválidos
    """
    plain = address.replace('-', '').strip().upper()
    if len(plain) != ADDRESS_ENCODED_SIZE:
        raise ValueError(f"Invalid address size: {address}")
    decoded = base64.b32decode(plain + '=')
    if len(decoded) != ADDRESS_DECODED_SIZE:
        raise ValueError(f"Invalid address size: {address}")
    body, checksum = decoded[:-CHECKSUM_SIZE], decoded[-CHECKSUM_SIZE:]
    if hashlib.sha3_256(body).digest()[:CHECKSUM_SIZE] != checksum:
        raise ValueError(f"Invalid address checksum: {address}")
    return decoded


def is_valid_address(address: str) -> bool:
    try:
        decode_address(address)
        return True
    except (ValueError, TypeError):
        return False


def derive_mosaic_id(nonce: int, owner_address: str) -> int:
    """Id de mosaico: 8 primeiros bytes (LE) de sha3_256(nonce || dono), bit alto zerado"""
    digest = hashlib.sha3_256(struct.pack('<I', nonce) + decode_address(owner_address)).digest()
    return struct.unpack('<Q', digest[:8])[0] & 0x7FFFFFFFFFFFFFFF


def to_hex_id(value: int) -> str:
    """Formato usado nos arquivos de configuração: 0x6BED'913F'A202'23F8"""
    raw = f"{value:016X}"
    return "0x" + "'".join(raw[i:i + 4] for i in range(0, 16, 4))
