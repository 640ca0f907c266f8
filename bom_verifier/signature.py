
import base64
import copy
import json
import logging
from typing import Any, Dict, Optional, Tuple

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from .canonical import canonicalize
from .result import SignatureResult

logger = logging.getLogger(__name__)

_HASHES = {"256": hashes.SHA256, "384": hashes.SHA384, "512": hashes.SHA512}

_CURVES = {
    "P-256": (ec.SECP256R1, 32),
    "P-384": (ec.SECP384R1, 48),
    "P-521": (ec.SECP521R1, 66),
}

class SignatureError(Exception):
    """Signature could not be checked (bad key, unsupported algorithm, malformed value)."""

def b64url_decode(s: str) -> bytes:
    if not isinstance(s, str):
        raise SignatureError("expected a base64url string")
    try:
        return base64.urlsafe_b64decode(s + "=" * (-len(s) % 4))
    except ValueError as e:
        raise SignatureError(f"invalid base64url value: {e}") from e

def _b64url_int(s: str) -> int:
    return int.from_bytes(b64url_decode(s), "big")

def public_key_from_jwk(jwk: Dict[str, Any]):
    """RSA, EC (P-256/384/521) and OKP (Ed25519/Ed448) public JWKs."""
    if not isinstance(jwk, dict):
        raise SignatureError("JWK must be a JSON object")
    kty = jwk.get("kty")
    try:
        if kty == "RSA":
            return rsa.RSAPublicNumbers(_b64url_int(jwk["e"]), _b64url_int(jwk["n"])).public_key()
        if kty == "EC":
            crv = jwk.get("crv")
            if crv not in _CURVES:
                raise SignatureError(f"unsupported EC curve {crv!r}")
            curve, _ = _CURVES[crv]
            return ec.EllipticCurvePublicNumbers(
                _b64url_int(jwk["x"]), _b64url_int(jwk["y"]), curve()).public_key()
        if kty == "OKP":
            crv = jwk.get("crv")
            if crv == "Ed25519":
                return ed25519.Ed25519PublicKey.from_public_bytes(b64url_decode(jwk["x"]))
            if crv == "Ed448":
                return ed448.Ed448PublicKey.from_public_bytes(b64url_decode(jwk["x"]))
            raise SignatureError(f"unsupported OKP curve {crv!r}")
    except KeyError as e:
        raise SignatureError(f"JWK is missing member {e.args[0]!r}") from None
    except (ValueError, UnsupportedAlgorithm) as e:
        raise SignatureError(f"invalid {kty} JWK: {e}") from e
    raise SignatureError(f"unsupported key type {kty!r}")

def load_jwk_file(path: str) -> Dict[str, Any]:
    with open(path, 'rb') as f:
        return json.loads(f.read().decode("utf-8-sig"))

def signed_bytes(document: Dict[str, Any]) -> bytes:
    """
    JSF signing input: the whole document minus signature.value and minus
    any top-level properties listed in signature.excludes, canonicalized.
    """
    doc = copy.deepcopy(document)
    sig = doc["signature"]
    sig.pop("value", None)
    excludes = sig.get("excludes") or []
    if not isinstance(excludes, list) or not all(isinstance(name, str) for name in excludes):
        raise SignatureError("signature.excludes must be an array of property names")
    for name in excludes:
        if name != "signature":
            doc.pop(name, None)
    return canonicalize(doc)

def _raw_ecdsa_to_der(sig: bytes, size: int) -> bytes:
    if len(sig) != 2 * size:
        raise SignatureError(f"ECDSA signature must be {2 * size} bytes, got {len(sig)}")
    return encode_dss_signature(int.from_bytes(sig[:size], "big"), int.from_bytes(sig[size:], "big"))

def verify_jsf(key, algorithm: str, sig: bytes, data: bytes) -> bool:
    """Returns False on a bad signature; raises SignatureError if it cannot be checked."""
    family, bits = algorithm[:2], algorithm[2:]
    try:
        if algorithm == "Ed25519" and isinstance(key, ed25519.Ed25519PublicKey):
            key.verify(sig, data)
        elif algorithm == "Ed448" and isinstance(key, ed448.Ed448PublicKey):
            key.verify(sig, data)
        elif family == "RS" and bits in _HASHES and isinstance(key, rsa.RSAPublicKey):
            key.verify(sig, data, padding.PKCS1v15(), _HASHES[bits]())
        elif family == "PS" and bits in _HASHES and isinstance(key, rsa.RSAPublicKey):
            h = _HASHES[bits]()
            key.verify(sig, data, padding.PSS(mgf=padding.MGF1(h), salt_length=h.digest_size), h)
        elif family == "ES" and bits in ("256", "384", "512") and isinstance(key, ec.EllipticCurvePublicKey):
            size = (key.curve.key_size + 7) // 8
            key.verify(_raw_ecdsa_to_der(sig, size), data, ec.ECDSA(_HASHES[bits]()))
        else:
            raise SignatureError(f"Unsupported signature algorithm {algorithm!r} for {type(key).__name__}")
    except InvalidSignature:
        return False
    return True

def _choose_key(sig: Dict[str, Any], key_file: Optional[str], allow_embedded_key: bool) -> Tuple[Any, str]:
    if key_file is not None:
        try:
            jwk = load_jwk_file(key_file)
        except (OSError, ValueError) as e:
            raise SignatureError(f"Failed to read JWK from {key_file}: {e}") from e
        return public_key_from_jwk(jwk), "key-file"
    if allow_embedded_key and sig.get("publicKey") is not None:
        return public_key_from_jwk(sig["publicKey"]), "embedded"
    raise SignatureError("No public key available")

def verify_signature(document: Dict[str, Any], key_file: Optional[str] = None,
                     allow_embedded_key: bool = False) -> SignatureResult:
    """
    Check the JSF signature of a BOM document.
      - no `signature` member: nothing to check (verified, not present)
      - a key file takes precedence over an embedded publicKey
      - the embedded publicKey is trusted only with allow_embedded_key
    """
    if "signature" not in document:
        return SignatureResult(True, False, "No signature found in SBOM. Skipping signature verification.")

    if key_file is None and not allow_embedded_key:
        return SignatureResult(False, True,
                               "Signature found but no verification key provided. "
                               "Use --key-file or --allow-embedded-key.")

    sig = document["signature"]
    if not isinstance(sig, dict):
        return SignatureResult(False, True, "Signature verification failed: signature must be an object")
    if "signers" in sig or "chain" in sig:
        return SignatureResult(False, True,
                               "Signature verification failed: multiple signatures (signers/chain) are not supported")

    algorithm = sig.get("algorithm")
    try:
        key, source = _choose_key(sig, key_file, allow_embedded_key)
        if not isinstance(algorithm, str):
            raise SignatureError("signature.algorithm is missing")
        value = b64url_decode(sig.get("value"))
        ok = verify_jsf(key, algorithm, value, signed_bytes(document))
    except (SignatureError, ValueError) as e:
        logger.warning("signature not checked: %s", e)
        return SignatureResult(False, True, f"Signature verification failed: {e}",
                               {"algorithm": algorithm})

    details = {"algorithm": algorithm, "key_source": source}
    if not ok:
        return SignatureResult(False, True, "Signature verification failed: signature does not match", details)
    return SignatureResult(True, True, "Signature verification passed.", details)
