"""Error types raised by the Memory Bank services."""


class MemoryBankError(Exception):
    """Base class for all Memory Bank errors."""


class NotFoundError(MemoryBankError, LookupError):
    """A referenced project or file has no stored content."""


class InvalidArgumentError(MemoryBankError, ValueError):
    """Request parameters were rejected before touching the store or model."""


class DependencyFailureError(MemoryBankError, RuntimeError):
    """The tokenizer, embedding model, or a storage backend failed."""
