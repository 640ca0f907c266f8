
import hashlib
import logging
from typing import Dict

logger = logging.getLogger(__name__)

# Manifest identifier -> hashlib constructor name
SUPPORTED_ALGORITHMS: Dict[str, str] = {
    "MD5": "md5",
    "SHA-1": "sha1",
    "SHA-256": "sha256",
    "SHA-384": "sha384",
    "SHA-512": "sha512",
}

def is_supported(algorithm: str) -> bool:
    return algorithm in SUPPORTED_ALGORITHMS

def hash_file(path: str, algorithm: str, chunk_size: int = 2**20) -> str:
    try:
        h = hashlib.new(SUPPORTED_ALGORITHMS[algorithm])
    except KeyError:
        raise ValueError(f"Hash algorithm {algorithm} is not supported.") from None
    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            h.update(chunk)
    digest = h.hexdigest()
    logger.debug("%s %s = %s", algorithm, path, digest)
    return digest
