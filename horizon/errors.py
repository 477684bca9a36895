"""
Error types raised by the simulation core.

Every error carries a stable message. Translating these into transport
status codes is left to whatever adapter sits in front of the core.
"""


class SimulationError(Exception):
    """Base class for all simulation errors"""
    pass


class InvalidArgumentError(SimulationError, ValueError):
    """Raised when an argument is outside its accepted domain"""
    pass


class IllegalStateError(SimulationError, RuntimeError):
    """Raised when an operation is not allowed in the current horizon state"""
    pass


class EntityNotFoundError(SimulationError, LookupError):
    """Raised when a lookup by id (or login) finds nothing"""
    pass


class InsufficientEntitiesError(SimulationError):
    """Raised when an operation needs at least one active entity"""
    pass


class ConfigLoadError(SimulationError):
    """Raised when configuration loading or validation fails"""
    pass
