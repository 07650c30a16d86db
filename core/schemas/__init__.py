"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module: field tree node
types, error taxonomy, and serializable commitment/proof records.
"""

# Field tree node types
from .tree import (
    FieldMap,
    FieldNode,
    Group,
    Path,
    Scalar,
)

# Error models and exceptions
from .errors import (
    DecodingError,
    DescriptorError,
    DescriptorException,
    DuplicateFieldError,
    EmptyLeafSetError,
    EncodingError,
    ErrorCodes,
    MalformedGroupError,
    PathNotFoundError,
)

# Commitment and proof records
from .commitment import (
    CommitmentRecord,
    LeafRecord,
    ProofRecord,
    validate_hex_bytes,
    validate_hex_hash,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)


__all__ = [
    # Tree
    "FieldMap",
    "FieldNode",
    "Group",
    "Path",
    "Scalar",
    # Errors
    "DecodingError",
    "DescriptorError",
    "DescriptorException",
    "DuplicateFieldError",
    "EmptyLeafSetError",
    "EncodingError",
    "ErrorCodes",
    "MalformedGroupError",
    "PathNotFoundError",
    # Records
    "CommitmentRecord",
    "LeafRecord",
    "ProofRecord",
    "validate_hex_bytes",
    "validate_hex_hash",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
