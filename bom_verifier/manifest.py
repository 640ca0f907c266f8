
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

class ManifestError(ValueError):
    """Raised when a BOM document does not have the expected shape."""

class ComponentType(str, Enum):
    APPLICATION = "application"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    CONTAINER = "container"
    PLATFORM = "platform"
    OPERATING_SYSTEM = "operating-system"
    DEVICE = "device"
    DEVICE_DRIVER = "device-driver"
    FIRMWARE = "firmware"
    FILE = "file"
    MACHINE_LEARNING_MODEL = "machine-learning-model"
    DATA = "data"
    CRYPTOGRAPHIC_ASSET = "cryptographic-asset"

# CycloneDX hash algorithm enumeration
HASH_ALGORITHMS = (
    "MD5", "SHA-1", "SHA-256", "SHA-384", "SHA-512",
    "SHA3-256", "SHA3-384", "SHA3-512",
    "BLAKE2b-256", "BLAKE2b-384", "BLAKE2b-512", "BLAKE3",
)

@dataclass(frozen=True)
class Hash:
    algorithm: str
    content: str

@dataclass(frozen=True)
class Component:
    name: str
    type: ComponentType
    hashes: Tuple[Hash, ...] = ()
    components: Tuple["Component", ...] = ()

    @property
    def is_file(self) -> bool:
        return self.type is ComponentType.FILE

@dataclass(frozen=True)
class Bom:
    metadata_component: Optional[Component] = None
    components: Tuple[Component, ...] = ()

    def roots(self) -> List[Component]:
        """Metadata component first (if any), then the top-level components."""
        out = [self.metadata_component] if self.metadata_component is not None else []
        out.extend(self.components)
        return out

def load_manifest_from_bytes(b: bytes) -> Dict[str, Any]:
    try:
        doc = json.loads(b.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Failed to parse SBOM JSON: {e}") from e
    if not isinstance(doc, dict):
        raise ManifestError("SBOM document must be a JSON object")
    return doc

def load_manifest(path: str) -> Dict[str, Any]:
    with open(path, 'rb') as f:
        return load_manifest_from_bytes(f.read())

def _list_at(obj: Dict[str, Any], key: str, where: str) -> List[Any]:
    val = obj.get(key)
    if val is None:
        return []
    if not isinstance(val, list):
        raise ManifestError(f"{where}.{key} must be an array")
    return val

def _parse_hash(obj: Any, where: str) -> Hash:
    if not isinstance(obj, dict):
        raise ManifestError(f"{where} must be an object")
    alg = obj.get("alg")
    if alg not in HASH_ALGORITHMS:
        raise ManifestError(f"{where}.alg: unknown hash algorithm {alg!r}")
    content = obj.get("content")
    if not isinstance(content, str):
        raise ManifestError(f"{where}.content must be a string")
    return Hash(algorithm=alg, content=content)

def _parse_component(obj: Any, where: str) -> Component:
    if not isinstance(obj, dict):
        raise ManifestError(f"{where} must be an object")
    name = obj.get("name")
    if not isinstance(name, str):
        raise ManifestError(f"{where}.name must be a string")
    try:
        ctype = ComponentType(obj.get("type"))
    except ValueError:
        raise ManifestError(f"{where}.type: unknown component type {obj.get('type')!r}") from None
    hashes = tuple(_parse_hash(h, f"{where}.hashes[{i}]")
                   for i, h in enumerate(_list_at(obj, "hashes", where)))
    children = tuple(_parse_component(c, f"{where}.components[{i}]")
                     for i, c in enumerate(_list_at(obj, "components", where)))
    return Component(name=name, type=ctype, hashes=hashes, components=children)

def parse_bom(doc: Dict[str, Any]) -> Bom:
    """
    Build the read-only component tree from a decoded CycloneDX JSON document.
    Only name, type, hashes and nested components are kept.
    """
    meta = doc.get("metadata")
    if meta is not None and not isinstance(meta, dict):
        raise ManifestError("metadata must be an object")
    meta_component = None
    if meta and meta.get("component") is not None:
        meta_component = _parse_component(meta["component"], "metadata.component")
    components = tuple(_parse_component(c, f"components[{i}]")
                       for i, c in enumerate(_list_at(doc, "components", "$")))
    logger.debug("parsed BOM: metadata component=%s, %d top-level components",
                 meta_component is not None, len(components))
    return Bom(metadata_component=meta_component, components=components)
