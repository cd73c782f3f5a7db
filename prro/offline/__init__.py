"""
PRRO Offline — Public API
===========================
Offline document chain: control numbers, fiscal numbers, duration
policy, chain builder, verification and package framing.
"""

from prro.offline.chain import (
    ChainPhase,
    ChainState,
    OfflineChainBuilder,
    OfflineDocumentAssembler,
)
from prro.offline.control_number import (
    compute_control_number,
    control_number_source,
    crc32,
)
from prro.offline.duration import (
    MAX_MONTHLY_MINUTES,
    MAX_SESSION_MINUTES,
    can_continue,
    evaluate,
    warnings_for,
)
from prro.offline.errors import (
    MalformedFiscalNumberError,
    NoActiveSessionError,
    OfflineChainError,
    PackageError,
    PackageOverrunError,
    SessionAlreadyStartedError,
    SessionIdReusedError,
    SessionLimitExceededError,
    SessionStateError,
    SpliceAnchorMissingError,
    TruncatedPackageError,
)
from prro.offline.fiscal_number import (
    FiscalNumber,
    decode_fiscal_number,
    encode_fiscal_number,
    is_offline_fiscal_number,
)
from prro.offline.metadata import (
    SPLICE_ANCHOR,
    apply_offline_metadata,
    compute_document_hash,
    verify_document_hash,
)
from prro.offline.models import (
    ControlNumberInput,
    DocumentKind,
    OfflineDocumentRecord,
    OfflineSession,
    SessionStats,
    allocate_local_number,
)
from prro.offline.package import (
    OfflinePackage,
    chunk_documents,
    decode_package,
    encode_package,
)
from prro.offline.verification import (
    ChainRejectionCode,
    ChainVerificationResult,
    Rejection,
    verify_offline_chain,
)

__all__ = [
    "OfflineChainBuilder",
    "OfflineDocumentAssembler",
    "ChainPhase",
    "ChainState",
    "compute_control_number",
    "control_number_source",
    "crc32",
    "MAX_SESSION_MINUTES",
    "MAX_MONTHLY_MINUTES",
    "evaluate",
    "can_continue",
    "warnings_for",
    "OfflineChainError",
    "SessionStateError",
    "NoActiveSessionError",
    "SessionAlreadyStartedError",
    "SessionIdReusedError",
    "SessionLimitExceededError",
    "MalformedFiscalNumberError",
    "PackageError",
    "TruncatedPackageError",
    "PackageOverrunError",
    "SpliceAnchorMissingError",
    "FiscalNumber",
    "encode_fiscal_number",
    "decode_fiscal_number",
    "is_offline_fiscal_number",
    "SPLICE_ANCHOR",
    "apply_offline_metadata",
    "compute_document_hash",
    "verify_document_hash",
    "ControlNumberInput",
    "DocumentKind",
    "OfflineDocumentRecord",
    "OfflineSession",
    "SessionStats",
    "allocate_local_number",
    "OfflinePackage",
    "chunk_documents",
    "encode_package",
    "decode_package",
    "ChainRejectionCode",
    "ChainVerificationResult",
    "Rejection",
    "verify_offline_chain",
]
