# tests/unit/test_identity.py

"""
Testes de identidades: tipos de rede, contas, endereços e ids de mosaico
"""

import pytest

from fogbed_symbol.exceptions import InvalidNetworkTypeError
from fogbed_symbol.identity import (
    ADDRESS_ENCODED_SIZE,
    Account,
    NetworkType,
    account_from_private_key,
    decode_address,
    derive_address,
    derive_mosaic_id,
    generate_account,
    generate_accounts,
    is_valid_address,
    to_hex_id,
)


# ==================== Testes: NetworkType ====================


@pytest.mark.unit
class TestNetworkType:
    """Testes de conversão e propriedades dos tipos de rede"""

    @pytest.mark.parametrize("value", [
        152, "152", "TEST_NET", "test-net", "test_net", "public-test", NetworkType.TEST_NET,
    ])
    def test_parse_test_net(self, value):
        assert NetworkType.parse(value) is NetworkType.TEST_NET

    @pytest.mark.parametrize("value,expected", [
        (104, NetworkType.MAIN_NET),
        ("private", NetworkType.PRIVATE),
        ("PRIVATE_TEST", NetworkType.PRIVATE_TEST),
        ("public", NetworkType.MAIN_NET),
    ])
    def test_parse_variants(self, value, expected):
        assert NetworkType.parse(value) is expected

    @pytest.mark.parametrize("value", [0, 153, "foo", "", True, None, 3.5])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidNetworkTypeError) as exc_info:
            NetworkType.parse(value)

        assert "Invalid network type" in str(exc_info.value)

    def test_invalid_network_type_is_value_error(self):
        with pytest.raises(ValueError):
            NetworkType.parse("mainnet-2")

    def test_identifiers(self):
        assert NetworkType.MAIN_NET.identifier == "public"
        assert NetworkType.TEST_NET.identifier == "public-test"
        assert NetworkType.PRIVATE.identifier == "private"
        assert NetworkType.PRIVATE_TEST.identifier == "private-test"

    def test_network_names(self):
        assert NetworkType.TEST_NET.network_name == "publicTest"
        assert NetworkType.PRIVATE_TEST.network_name == "privateTest"


# ==================== Testes: Contas e endereços ====================


@pytest.mark.unit
class TestAccounts:
    """Testes de geração de contas"""

    @pytest.mark.parametrize("network_type,prefix", [
        (NetworkType.MAIN_NET, "N"),
        (NetworkType.TEST_NET, "T"),
        (NetworkType.PRIVATE, "M"),
        (NetworkType.PRIVATE_TEST, "S"),
    ])
    def test_address_prefix(self, network_type, prefix):
        account = generate_account(network_type)

        assert len(account.address) == ADDRESS_ENCODED_SIZE
        assert account.address.startswith(prefix)

    def test_key_format(self, network_type):
        account = generate_account(network_type)

        assert len(account.private_key) == 64
        assert len(account.public_key) == 64
        assert account.public_key == account.public_key.upper()

    def test_generated_accounts_are_distinct(self, network_type):
        accounts = generate_accounts(network_type, 10)

        assert len(accounts) == 10
        assert len({a.address for a in accounts}) == 10

    def test_generate_zero_accounts(self, network_type):
        assert generate_accounts(network_type, 0) == []

    def test_account_from_private_key(self, network_type):
        account = generate_account(network_type)
        restored = account_from_private_key(account.private_key, network_type)

        assert restored == account

    def test_account_from_invalid_private_key(self, network_type):
        with pytest.raises(ValueError):
            account_from_private_key("ABCD", network_type)

    def test_address_depends_on_network(self):
        account = generate_account(NetworkType.TEST_NET)
        main_address = derive_address(account.public_key, NetworkType.MAIN_NET)

        assert main_address != account.address
        assert derive_address(account.public_key, "public-test") == account.address

    def test_dict_roundtrip(self, network_type):
        account = generate_account(network_type)
        data = account.to_dict()

        assert set(data) == {"privateKey", "publicKey", "address"}
        assert Account.from_dict(data) == account

    def test_repr_hides_private_key(self, network_type):
        account = generate_account(network_type)

        assert account.private_key not in repr(account)


@pytest.mark.unit
class TestAddressDecoding:
    """Testes de validação de endereço"""

    def test_decode_valid_address(self, network_type):
        account = generate_account(network_type)
        decoded = decode_address(account.address)

        assert len(decoded) == 24
        assert decoded[0] == int(network_type)
        assert is_valid_address(account.address)

    def test_tampered_address(self, network_type):
        address = generate_account(network_type).address
        replacement = "A" if address[10] != "A" else "B"
        tampered = address[:10] + replacement + address[11:]

        with pytest.raises(ValueError):
            decode_address(tampered)
        assert not is_valid_address(tampered)

    @pytest.mark.parametrize("value", ["", "not-an-address", "T" * 40])
    def test_invalid_addresses(self, value):
        assert not is_valid_address(value)


# ==================== Testes: Ids de mosaico ====================


@pytest.mark.unit
class TestReferenceVectors:
    """
    Vetores fixos: chave do teste 1 da RFC 8032; endereços e id de mosaico
    calculados com openssl (sha3-256 + rmd160), fora deste pacote
    """

    PRIVATE_KEY = "9D61B19DEFFD5A60BA844AF492EC2CC44449C5697B326919703BAC031CAE7F60"
    PUBLIC_KEY = "D75A980182B10AB7D54BFED3C964073A0EE172F3DAA62325AF021A68F707511A"
    TEST_NET_ADDRESS = "TBDHG3NHBCNLOAAK4OJFQALFUZUTWNE4ESDA7WA"
    MAIN_NET_ADDRESS = "NBDHG3NHBCNLOAAK4OJFQALFUZUTWNE4ERJ4C2A"

    def test_public_key(self):
        account = account_from_private_key(self.PRIVATE_KEY, NetworkType.TEST_NET)
        assert account.public_key == self.PUBLIC_KEY
        assert account.address == self.TEST_NET_ADDRESS

    @pytest.mark.parametrize("network_type,expected", [
        (NetworkType.TEST_NET, TEST_NET_ADDRESS),
        (NetworkType.MAIN_NET, MAIN_NET_ADDRESS),
    ])
    def test_address(self, network_type, expected):
        assert derive_address(self.PUBLIC_KEY, network_type) == expected

    def test_address_hash(self):
        decoded = decode_address(self.TEST_NET_ADDRESS)
        assert decoded[0] == 0x98
        assert decoded[1:21].hex() == "46736da7089ab7000ae392580165a6693b349c24"

    def test_mosaic_id(self):
        mosaic_id = derive_mosaic_id(0, self.TEST_NET_ADDRESS)
        assert mosaic_id == 0x474D5F6A806FFFB7
        assert to_hex_id(mosaic_id) == "0x474D'5F6A'806F'FFB7"


@pytest.mark.unit
class TestMosaicId:
    """Testes de derivação de ids de mosaico"""

    def test_deterministic(self, network_type):
        owner = generate_account(network_type).address

        assert derive_mosaic_id(0, owner) == derive_mosaic_id(0, owner)
        assert derive_mosaic_id(0, owner) != derive_mosaic_id(1, owner)

    def test_high_bit_cleared(self, network_type):
        for account in generate_accounts(network_type, 20):
            assert derive_mosaic_id(0, account.address) < 2 ** 63

    def test_to_hex_id(self):
        assert to_hex_id(0x6BED913FA20223F8) == "0x6BED'913F'A202'23F8"
        assert to_hex_id(1) == "0x0000'0000'0000'0001"
