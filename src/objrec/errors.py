"""Error types raised by the recognition and visual-words pipelines."""


class ObjrecError(Exception):
    """Base class for all objrec errors."""


class LoadError(ObjrecError):
    """Reference, vocabulary or histogram data is missing or malformed."""


class BuildError(ObjrecError):
    """Vocabulary construction was given an unusable corpus or parameters."""


class QuantizeError(ObjrecError):
    """Histogram quantization cannot run against the given vocabulary."""


class DetectorError(ObjrecError):
    """An image could not be read or decoded by the feature detector."""


class OperationCancelled(ObjrecError):
    """A long-running operation was stopped by its cancel callback."""


class ConfigError(ObjrecError):
    """A configuration file has an unknown section, key or bad value."""
