"""Shared fixtures. RSA key generation is slow, so keys are made once per session."""

import pytest

from okta_dpop import ClientConfiguration, DPoPProofGenerator, RSAPrivateKeyComponents
from okta_dpop.keys import generate_private_key

DOMAIN = "https://example.okta.com"


@pytest.fixture(scope="session")
def private_key():
    return generate_private_key()


@pytest.fixture(scope="session")
def key_components(private_key):
    return RSAPrivateKeyComponents.from_private_key(private_key)


@pytest.fixture(scope="session")
def generator(key_components):
    return DPoPProofGenerator(ClientConfiguration(okta_domain=DOMAIN, private_key=key_components))
