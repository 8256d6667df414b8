"""Exception hierarchy for gravity simulation."""


class GravitySimError(Exception):
    """Base class for all errors raised by gravity_sim."""


class ConstructionError(GravitySimError, ValueError):
    """Invalid particle data rejected before it can enter the store."""


class IndexOutOfRangeError(GravitySimError, IndexError):
    """An update referenced a particle index beyond the store's size.

    Indicates a scheduling bug (updates computed against a different
    snapshot than the one being applied) and is not recoverable.
    """


class MalformedInputError(GravitySimError, ValueError):
    """Particle data was unusable for a computation (e.g. a NaN mass)."""


class BenchmarkError(GravitySimError, ValueError):
    """A benchmark was requested with an unusable workload."""


class ConfigError(GravitySimError, ValueError):
    """Invalid configuration value."""
