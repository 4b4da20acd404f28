# tests/test_cert_store.py

import datetime
import json
import logging

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from autossl_core import CertStore, StoreConfig
from autossl_core.codec import JsonCodec
from autossl_core.errors import DecodeError, StorageError
from autossl_core.storage import CertificateRecord, InMemoryStorage


class BrokenStorage(InMemoryStorage):
    def get(self, key):
        raise StorageError("backend down")

    def keys_with_suffix(self, suffix):
        raise StorageError("backend down")


def self_signed(not_after):
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "x.com")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_after - datetime.timedelta(days=90))
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM).decode("ascii")
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    return cert_pem, key_pem


def test_cert_roundtrip(store):
    store.set_cert("x.com", "chain-x", "key-x", "cert-x", 1700000000)
    store.set_cert("y.com", "chain-y", "key-y", "cert-y", "1800000000")

    got = store.get_cert("x.com")
    assert got == CertificateRecord("chain-x", "key-x", "cert-x", 1700000000)
    assert store.get_cert("y.com").expiry == 1800000000


def test_cert_written_as_single_blob(store, memory):
    store.set_cert("x.com", "chain", "key", "cert", 42)
    assert list(memory.data) == ["x.com:latest"]
    blob = json.loads(memory.get("x.com:latest"))
    assert blob == {"fullchain_pem": "chain", "privkey_pem": "key", "cert_pem": "cert", "expiry": 42}


def test_get_cert_absent_is_none(store):
    assert store.get_cert("nothing.com") is None


def test_get_cert_malformed(store, memory):
    memory.set("bad.com:latest", "{not json")
    with pytest.raises(DecodeError):
        store.get_cert("bad.com")

    memory.set("half.com:latest", json.dumps({"fullchain_pem": "c"}))
    with pytest.raises(DecodeError):
        store.get_cert("half.com")


def test_get_cert_store_failure():
    store = CertStore(StoreConfig(adapter=BrokenStorage(), codec=JsonCodec()))
    with pytest.raises(StorageError):
        store.get_cert("x.com")
    with pytest.raises(StorageError):
        store.all_cert_domains()


def test_set_cert_reads_expiry_from_pem(store):
    not_after = datetime.datetime(2031, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
    cert_pem, key_pem = self_signed(not_after)
    store.set_cert("x.com", cert_pem, key_pem, cert_pem)
    assert store.get_cert("x.com").expiry == int(not_after.timestamp())


def test_delete_cert(store):
    store.set_cert("x.com", "c", "k", "l", 1)
    store.delete_cert("x.com")
    assert store.get_cert("x.com") is None


def test_all_cert_domains(store, memory):
    memory.set("x.com:latest", "{}")
    memory.set("y.com:latest", "{}")
    memory.set("x.com:main", "{}")
    memory.set("z.com:challenge:abc", "tok")
    memory.set("z.com:issue_cert_lock", "tok")
    assert set(store.all_cert_domains()) == {"x.com", "y.com"}


def test_challenges(store, memory):
    assert store.get_challenge("x.com", "tok1") is None
    store.set_challenge("x.com", "tok1", "tok1.thumbprint")
    assert memory.get("x.com:challenge:tok1") == "tok1.thumbprint"
    assert store.get_challenge("x.com", "tok1") == "tok1.thumbprint"
    assert store.get_challenge("x.com", "tok2") is None
    store.delete_challenge("x.com", "tok1")
    assert store.get_challenge("x.com", "tok1") is None


def test_adapter_key_helpers(store):
    store.create_multiname("x.com")
    assert store.get_adapter_keys(":main") == ["x.com:main"]
    assert store.get_adapter_key_main("x.com", decode=True) == {"domain": "x.com", "subdomain": "x.com"}
    assert isinstance(store.get_adapter_key("x.com:main"), str)
    assert store.get_adapter_key("missing:main", decode=True) is None


class RejectingStorage(InMemoryStorage):
    def set(self, key, value, ttl=None):
        return False


def test_get_cert_invalid_utf8_is_decode_error(store, memory):
    memory.set("x.com:latest", b"\xff\xfe{}")
    with pytest.raises(DecodeError):
        store.get_cert("x.com")


def test_set_cert_rejected_write(caplog):
    store = CertStore(StoreConfig(adapter=RejectingStorage(), codec=JsonCodec()))
    with caplog.at_level(logging.INFO, logger="autossl.store"):
        assert store.set_cert("x.com", "c", "k", "l", 1) is False
    assert "rejected write for x.com" in caplog.text
    assert "stored x.com" not in caplog.text
