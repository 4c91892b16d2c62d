import pytest

from x402_agent.constants import (
    CHAIN_PROFILES,
    SUPPORTED_NETWORKS,
    USDC_ADDRESSES,
    UnsupportedNetworkError,
    get_chain_profile,
    get_usdc_address,
)


def test_supported_networks_match_expected():
    assert SUPPORTED_NETWORKS == ["eip155:8453", "eip155:84532"]


def test_usdc_addresses_match_expected():
    assert USDC_ADDRESSES["eip155:8453"] == "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
    assert USDC_ADDRESSES["eip155:84532"] == "0x036CbD53842c5426634e7929541eC2318f3dCF7e"


def test_every_supported_network_has_one_profile_and_usdc_address():
    for network in SUPPORTED_NETWORKS:
        assert get_chain_profile(network) is CHAIN_PROFILES[network]
        assert get_usdc_address(network).startswith("0x")
    assert get_chain_profile("eip155:84532")["chain_id"] == 84532


def test_unknown_network_raises():
    with pytest.raises(UnsupportedNetworkError):
        get_usdc_address("eip155:1")
    with pytest.raises(UnsupportedNetworkError):
        get_chain_profile("eip155:1")
