import pytest
from autossl_core import CertStore, StoreConfig
from autossl_core.codec import JsonCodec
from autossl_core.storage import InMemoryStorage


class FakeSleep:
    """Records sleeps and runs an optional hook after each one."""

    def __init__(self, hook=None):
        self.calls = []
        self.hook = hook

    def __call__(self, seconds):
        self.calls.append(seconds)
        if self.hook:
            self.hook(len(self.calls))

    @property
    def total(self):
        return sum(self.calls)


@pytest.fixture
def make_sleep():
    return FakeSleep


@pytest.fixture
def memory():
    return InMemoryStorage()


@pytest.fixture
def store(memory):
    return CertStore(StoreConfig(adapter=memory, codec=JsonCodec()), sleep=FakeSleep())
