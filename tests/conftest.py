import base64
import hashlib
import json

import pytest

from bom_verifier.manifest import Component, ComponentType, Hash
from bom_verifier.signature import signed_bytes


def sha(alg: str, data: bytes) -> str:
    return hashlib.new(alg, data).hexdigest()


def file_component(name, *hashes, children=()):
    return Component(name=name, type=ComponentType.FILE,
                     hashes=tuple(Hash(a, c) for a, c in hashes),
                     components=tuple(children))


def container(name, *children, ctype=ComponentType.LIBRARY):
    return Component(name=name, type=ctype, components=tuple(children))


def b64url(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def sign_document(doc, algorithm, public_jwk, sign, embed_key=True, excludes=None):
    """Attach a JSF signature produced by `sign(data) -> bytes`."""
    sig = {"algorithm": algorithm}
    if embed_key:
        sig["publicKey"] = public_jwk
    if excludes:
        sig["excludes"] = excludes
    doc["signature"] = sig
    sig["value"] = b64url(sign(signed_bytes(doc)))
    return doc


@pytest.fixture
def base_dir(tmp_path):
    d = tmp_path / "base"
    d.mkdir()
    return d


@pytest.fixture
def write(base_dir):
    def _write(rel: str, data: bytes = b"hello"):
        p = base_dir / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        return p
    return _write


@pytest.fixture
def write_json(tmp_path):
    def _write_json(name, obj):
        p = tmp_path / name
        p.write_text(json.dumps(obj), encoding="utf-8")
        return p
    return _write_json
