"""Shared fixtures for node tests.

FakeHost implements the host interface without any network access. Every
request is recorded and answered by a handler function, which may return
a value or an exception instance to raise.
"""

import pytest

from stepfun_nodes.credentials import StepFunCredential
from stepfun_nodes.host import BaseHost
from stepfun_nodes.models import Item


class FakeHost(BaseHost):
    """In-memory host recording requests."""

    def __init__(self, items=None, parameters=None, handler=None,
                 credential=None, continue_on_fail=False):
        self.items = [Item()] if items is None else list(items)
        self.parameters = parameters or {}
        self.handler = handler or (lambda request: {})
        self.credential = credential or StepFunCredential(
            api_key="test-key",
            base_url="https://api.example.com/v1"
        )
        self.continue_on_fail = continue_on_fail
        self.requests = []
        self.authenticated = []
        self.credential_fetches = 0

    def get_input_data(self):
        return list(self.items)

    def get_node_parameter(self, name, item_index, default=None):
        if name not in self.parameters:
            return default
        value = self.parameters[name]
        if callable(value):
            return value(self.items[item_index])
        return value

    def fetch_credentials(self, name):
        assert name == "stepFunApi"
        self.credential_fetches += 1
        return self.credential

    def send(self, request):
        self.requests.append(request)
        result = self.handler(request)
        if isinstance(result, Exception):
            raise result
        return result

    def send_authenticated(self, credential_name, request):
        self.authenticated.append(request)
        return self.send(self.credential.authenticate(request))


@pytest.fixture
def make_host():
    """Factory fixture creating FakeHost instances."""
    return FakeHost
