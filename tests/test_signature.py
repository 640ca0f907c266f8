import json

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from bom_verifier.signature import SignatureError, public_key_from_jwk, verify_signature

from conftest import b64url, sign_document


def _int_b64(n: int, size: int) -> str:
    return b64url(n.to_bytes(size, "big"))


@pytest.fixture(scope="module")
def ec_key():
    priv = ec.generate_private_key(ec.SECP256R1())
    nums = priv.public_key().public_numbers()
    jwk = {"kty": "EC", "crv": "P-256", "x": _int_b64(nums.x, 32), "y": _int_b64(nums.y, 32)}

    def sign(data):
        r, s = decode_dss_signature(priv.sign(data, ec.ECDSA(hashes.SHA256())))
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")
    return jwk, sign


@pytest.fixture(scope="module")
def rsa_key():
    priv = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    nums = priv.public_key().public_numbers()
    jwk = {"kty": "RSA", "n": _int_b64(nums.n, 256), "e": _int_b64(nums.e, 3)}
    return jwk, priv


def bom():
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.6",
        "serialNumber": "urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79",
        "components": [{"type": "file", "name": "a.txt", "hashes": [{"alg": "SHA-256", "content": "00" * 32}]}],
    }


def test_unsigned_document_is_skipped():
    res = verify_signature(bom())
    assert res.verified and not res.signature_present
    assert res.message == "No signature found in SBOM. Skipping signature verification."


def test_signature_without_any_key_fails(ec_key):
    jwk, sign = ec_key
    res = verify_signature(sign_document(bom(), "ES256", jwk, sign))
    assert not res.verified and res.signature_present
    assert "--key-file or --allow-embedded-key" in res.message


def test_embedded_key_when_allowed(ec_key):
    jwk, sign = ec_key
    res = verify_signature(sign_document(bom(), "ES256", jwk, sign), allow_embedded_key=True)
    assert res.verified, res.message
    assert res.message == "Signature verification passed."
    assert res.details["key_source"] == "embedded"


def test_tampered_document_fails(ec_key):
    jwk, sign = ec_key
    doc = sign_document(bom(), "ES256", jwk, sign)
    doc["components"][0]["name"] = "b.txt"
    res = verify_signature(doc, allow_embedded_key=True)
    assert not res.verified
    assert res.message.startswith("Signature verification failed")


def test_key_file(tmp_path, ec_key):
    jwk, sign = ec_key
    key_file = tmp_path / "key.jwk"
    key_file.write_text(json.dumps(jwk), encoding="utf-8")
    doc = sign_document(bom(), "ES256", jwk, sign, embed_key=False)
    res = verify_signature(doc, key_file=str(key_file))
    assert res.verified, res.message
    assert res.details["key_source"] == "key-file"


def test_key_file_takes_precedence_over_embedded_key(tmp_path, ec_key):
    jwk, sign = ec_key
    other = ec.generate_private_key(ec.SECP256R1()).public_key().public_numbers()
    key_file = tmp_path / "other.jwk"
    key_file.write_text(json.dumps(
        {"kty": "EC", "crv": "P-256", "x": _int_b64(other.x, 32), "y": _int_b64(other.y, 32)}), encoding="utf-8")
    doc = sign_document(bom(), "ES256", jwk, sign)
    res = verify_signature(doc, key_file=str(key_file), allow_embedded_key=True)
    assert not res.verified


def test_unreadable_key_file_is_a_failed_result(tmp_path, ec_key):
    jwk, sign = ec_key
    key_file = tmp_path / "broken.jwk"
    key_file.write_text("{not json", encoding="utf-8")
    res = verify_signature(sign_document(bom(), "ES256", jwk, sign), key_file=str(key_file))
    assert not res.verified
    assert "Failed to read JWK" in res.message


def test_excluded_properties_are_not_signed(ec_key):
    jwk, sign = ec_key
    doc = sign_document(bom(), "ES256", jwk, sign, excludes=["serialNumber"])
    doc["serialNumber"] = "urn:uuid:00000000-0000-0000-0000-000000000000"
    assert verify_signature(doc, allow_embedded_key=True).verified


@pytest.mark.parametrize("alg", ["RS256", "RS512", "PS256", "PS384"])
def test_rsa_algorithms(rsa_key, alg):
    jwk, priv = rsa_key
    h = {"256": hashes.SHA256, "384": hashes.SHA384, "512": hashes.SHA512}[alg[2:]]()
    if alg.startswith("PS"):
        pad = padding.PSS(mgf=padding.MGF1(h), salt_length=h.digest_size)
    else:
        pad = padding.PKCS1v15()
    doc = sign_document(bom(), alg, jwk, lambda data: priv.sign(data, pad, h))
    assert verify_signature(doc, allow_embedded_key=True).verified


def test_ed25519():
    priv = ed25519.Ed25519PrivateKey.generate()
    raw = priv.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    jwk = {"kty": "OKP", "crv": "Ed25519", "x": b64url(raw)}
    doc = sign_document(bom(), "Ed25519", jwk, priv.sign)
    assert verify_signature(doc, allow_embedded_key=True).verified


def test_unsupported_algorithm_fails(ec_key):
    jwk, sign = ec_key
    res = verify_signature(sign_document(bom(), "HS256", jwk, sign), allow_embedded_key=True)
    assert not res.verified
    assert "Unsupported signature algorithm" in res.message


def test_multiple_signers_are_not_supported():
    doc = bom()
    doc["signature"] = {"signers": [{"algorithm": "ES256", "value": "AA"}]}
    res = verify_signature(doc, allow_embedded_key=True)
    assert not res.verified and res.signature_present


def test_embedded_key_missing(ec_key):
    jwk, sign = ec_key
    doc = sign_document(bom(), "ES256", jwk, sign, embed_key=False)
    res = verify_signature(doc, allow_embedded_key=True)
    assert not res.verified
    assert "No public key available" in res.message


@pytest.mark.parametrize("jwk", [
    {"kty": "oct", "k": "AA"},
    {"kty": "EC", "crv": "secp256k1", "x": "AA", "y": "AA"},
    {"kty": "RSA", "n": "AQAB"},
    {"kty": "OKP", "crv": "X25519", "x": "AA"},
])
def test_unusable_jwks_are_rejected(jwk):
    with pytest.raises(SignatureError):
        public_key_from_jwk(jwk)


def test_signing_input_matches_hand_canonicalized_document(tmp_path):
    priv = ed25519.Ed25519PrivateKey.from_private_bytes(bytes.fromhex(
        "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"))
    raw = priv.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    assert raw.hex() == "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
    key_file = tmp_path / "key.jwk"
    key_file.write_text(json.dumps({"kty": "OKP", "crv": "Ed25519", "x": b64url(raw)}), encoding="utf-8")

    doc = {
        "specVersion": "1.6",
        "serialNumber": "urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79",
        "bomFormat": "CycloneDX",
        "components": [{"type": "file", "name": "a.txt", "version": 1.50}],
        "signature": {"excludes": ["serialNumber"], "algorithm": "Ed25519"},
    }
    signing_input = (b'{"bomFormat":"CycloneDX",'
                     b'"components":[{"name":"a.txt","type":"file","version":1.5}],'
                     b'"signature":{"algorithm":"Ed25519","excludes":["serialNumber"]},'
                     b'"specVersion":"1.6"}')
    doc["signature"]["value"] = b64url(priv.sign(signing_input))
    res = verify_signature(doc, key_file=str(key_file))
    assert res.verified, res.message


@pytest.mark.parametrize("excludes", [5, "serialNumber", [["serialNumber"]], [None]])
def test_malformed_excludes_is_a_failed_result(ec_key, excludes):
    jwk, sign = ec_key
    doc = sign_document(bom(), "ES256", jwk, sign)
    doc["signature"]["excludes"] = excludes
    res = verify_signature(doc, allow_embedded_key=True)
    assert not res.verified and res.signature_present
    assert "signature.excludes must be an array" in res.message
