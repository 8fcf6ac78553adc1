import pytest

from fakes import FakeGiteaTransport
from gitea_provider.adapters.gitea import GiteaClient, GiteaProvider

DOMAIN = "gitea.example.com"


@pytest.fixture
def transport():
    return FakeGiteaTransport()


@pytest.fixture
def client(transport):
    return GiteaClient(transport)


@pytest.fixture
def destructive_client(transport):
    return GiteaClient(transport, destructive_actions=True)


@pytest.fixture
def provider(client):
    return GiteaProvider(client, domain=DOMAIN)
