
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

class VerificationStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    SKIPPED = "SKIPPED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"

@dataclass(frozen=True)
class HashResult:
    algorithm: str
    status: VerificationStatus
    detail: Optional[str] = None

@dataclass(frozen=True)
class ComponentVerificationResult:
    component_name: str
    status: VerificationStatus
    hash_results: Tuple[HashResult, ...] = ()
    sub_component_results: Tuple["ComponentVerificationResult", ...] = ()
    detail: Optional[str] = None  # set only when this node or a descendant failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component_name": self.component_name,
            "status": self.status.value,
            "hash_results": [
                {"algorithm": h.algorithm, "status": h.status.value, "detail": h.detail}
                for h in self.hash_results
            ],
            "sub_component_results": [s.to_dict() for s in self.sub_component_results],
            "detail": self.detail,
        }

@dataclass(frozen=True)
class UntrackedFileResult:
    untracked_files: Tuple[str, ...] = ()
    ignored_files: Tuple[str, ...] = ()

@dataclass(frozen=True)
class SignatureResult:
    verified: bool
    signature_present: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
