# fogbed_symbol/transactions.py

"""
Codec binário das transações de genesis (layout catapult)

    size(4) reserved(4) signature(64) signer(32) reserved(4)
    version(1) network(1) type(2) max_fee(8) deadline(8) body(...)

A assinatura cobre `generation hash seed || bytes a partir de version`.
"""

import hashlib
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from fogbed_symbol.exceptions import InvalidTransactionError
from fogbed_symbol.identity import KEY_SIZE, Account, NetworkType, load_private_key

SIGNATURE_SIZE = 64
SIGNATURE_OFFSET = 8
SIGNER_OFFSET = SIGNATURE_OFFSET + SIGNATURE_SIZE
HEADER_SIZE = SIGNER_OFFSET + KEY_SIZE + 4
BODY_OFFSET = HEADER_SIZE + 1 + 1 + 2 + 8 + 8

# Deadline canônico das transações de genesis (não usa relógio)
GENESIS_DEADLINE = 1


class TransactionType(IntEnum):
    VRF_KEY_LINK = 0x4243


class LinkAction(IntEnum):
    UNLINK = 0
    LINK = 1


@dataclass(frozen=True)
class TransactionHeader:
    size: int
    signature: bytes
    signer_public_key: str
    version: int
    network_type: int
    type: int
    max_fee: int
    deadline: int


def _generation_hash_bytes(generation_hash_seed: str) -> bytes:
    seed = bytes.fromhex(generation_hash_seed)
    if len(seed) != 32:
        raise ValueError(f"Generation hash seed must have 32 bytes, got {len(seed)}")
    return seed


def _to_bytes(payload: Union[bytes, str]) -> bytes:
    if isinstance(payload, str):
        try:
            return bytes.fromhex(payload)
        except ValueError as e:
            raise InvalidTransactionError(f"Payload is not valid hex: {e}") from e
    return bytes(payload)


def parse_header(payload: Union[bytes, str]) -> TransactionHeader:
    """
    Decodifica o cabeçalho de um payload assinado

    Raises:
        InvalidTransactionError: payload truncado ou tamanho declarado inconsistente
    """
    data = _to_bytes(payload)
    if len(data) < BODY_OFFSET:
        raise InvalidTransactionError(f"Payload too short ({len(data)} bytes)")

    size = struct.unpack_from('<I', data, 0)[0]
    if size != len(data):
        raise InvalidTransactionError(f"Declared size {size} differs from payload size {len(data)}")

    version, network, tx_type, max_fee, deadline = struct.unpack_from('<BBHQQ', data, HEADER_SIZE)
    return TransactionHeader(
        size=size,
        signature=data[SIGNATURE_OFFSET:SIGNER_OFFSET],
        signer_public_key=data[SIGNER_OFFSET:SIGNER_OFFSET + KEY_SIZE].hex().upper(),
        version=version,
        network_type=network,
        type=tx_type,
        max_fee=max_fee,
        deadline=deadline,
    )


def transaction_hash(payload: Union[bytes, str], generation_hash_seed: str) -> str:
    """Hash de conteúdo: sha3_256(R || signer || generation hash || dados assinados)"""
    data = _to_bytes(payload)
    parse_header(data)
    hasher = hashlib.sha3_256()
    hasher.update(data[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_SIZE // 2])
    hasher.update(data[SIGNER_OFFSET:SIGNER_OFFSET + KEY_SIZE])
    hasher.update(_generation_hash_bytes(generation_hash_seed))
    hasher.update(data[HEADER_SIZE:])
    return hasher.hexdigest().upper()


def verify_signature(payload: Union[bytes, str], generation_hash_seed: str) -> bool:
    data = _to_bytes(payload)
    header = parse_header(data)
    public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(header.signer_public_key))
    try:
        public_key.verify(header.signature, _generation_hash_bytes(generation_hash_seed) + data[HEADER_SIZE:])
        return True
    except InvalidSignature:
        return False


def sign_transaction(
    signer: Account,
    network_type: NetworkType,
    transaction_type: TransactionType,
    body: bytes,
    generation_hash_seed: str,
    deadline: int = GENESIS_DEADLINE,
    max_fee: int = 0,
    version: int = 1,
) -> bytes:
    """Monta e assina o payload completo"""
    size = BODY_OFFSET + len(body)
    signed_part = struct.pack('<BBHQQ', version, int(network_type), int(transaction_type), max_fee, deadline) + body
    signature = load_private_key(signer.private_key).sign(
        _generation_hash_bytes(generation_hash_seed) + signed_part
    )
    return (
        struct.pack('<II', size, 0)
        + signature
        + bytes.fromhex(signer.public_key)
        + struct.pack('<I', 0)
        + signed_part
    )


def create_vrf_key_link(
    signer: Account,
    vrf_public_key: str,
    network_type: NetworkType,
    generation_hash_seed: str,
    deadline: int = GENESIS_DEADLINE,
) -> bytes:
    """Transação que vincula a chave VRF à conta de assinatura do nó"""
    linked = bytes.fromhex(vrf_public_key)
    if len(linked) != KEY_SIZE:
        raise ValueError(f"VRF public key must have {KEY_SIZE} bytes, got {len(linked)}")
    body = linked + struct.pack('<B', LinkAction.LINK)
    return sign_transaction(
        signer,
        network_type,
        TransactionType.VRF_KEY_LINK,
        body,
        generation_hash_seed,
        deadline=deadline,
    )
