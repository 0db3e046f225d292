"""
Exception hierarchy for topomap.

Every error raised on purpose by the engine derives from TopomapError so
callers (the CLI in particular) can report them uniformly.
"""


class TopomapError(Exception):
    """Base class for all topomap errors."""


class MalformedGraphError(TopomapError):
    """
    Raised when a graph violates its structural contract.

    Dangling edge endpoints, duplicate node ids and inconsistent entity
    catalogs are programmer errors and fail fast at construction.
    """


class InvalidFocusError(TopomapError):
    """
    Raised when a cluster layout is requested for a layer that has none.

    Attributes:
        focus: The rejected layer name.
    """

    def __init__(self, focus: str):
        self.focus = focus
        super().__init__(f"Cluster layout needs a 'process' or 'host' focus, got '{focus}'")


class UnknownLayerError(TopomapError):
    """
    Raised when a layer name does not match any LayerType.

    Attributes:
        layer: The name that could not be resolved.
    """

    def __init__(self, layer: str):
        self.layer = layer
        super().__init__(f"Unknown layer: '{layer}'")


class ConfigError(TopomapError):
    """
    Raised when a configuration or catalog file cannot be loaded.

    Attributes:
        path: The offending file.
        message: Human-readable reason.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class UnknownFilterError(TopomapError):
    """
    Raised when a filter key has an unknown prefix or value.

    Attributes:
        key: The rejected filter key.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Unknown filter: '{key}' "
            "(expected ns:default, app:<name>, tier:backend or tier:frontend)"
        )
