## errors.py


class StreamHashError(Exception):
    """Base exception for streamhash errors."""
    pass


class ConfigError(StreamHashError, ValueError):
    """Invalid construction parameters (target dimension, labels, capacity)."""
    pass


class NotInitialized(ConfigError):
    """The cursor has no stream adapter bound."""
    pass


class StreamReadError(StreamHashError, IOError):
    """The underlying record source failed. Never retried internally."""
    pass


class ContractViolation(StreamHashError, RuntimeError):
    """The caller broke the streaming or numeric protocol."""
    pass


class NotStarted(ContractViolation):
    """advance() was called before start()."""
    pass


class NoCurrentExample(ContractViolation):
    """The current example was read before any successful advance()."""
    pass


class Closed(ContractViolation):
    """The cursor was used after stop()."""
    pass


class DimensionMismatch(ContractViolation):
    """Operands do not live in the same d-dimensional space."""
    pass


class BufferExhausted(ContractViolation):
    """Every raw buffer slot is held; release examples before reading more."""
    pass
