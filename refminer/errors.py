"""Exception types raised by refminer."""


class RefminerError(Exception):
    """Base class for all refminer errors."""


class ConfigurationError(RefminerError):
    """Unusable configuration: missing credentials or selection criterion. Fatal."""


class AuthenticationError(RefminerError):
    """Login to the entity store failed. Fatal."""


class EntityLoadError(RefminerError):
    """An entity could not be loaded. Recoverable per entity."""


class PageRenderError(RefminerError):
    """A source page could not be rendered. Recoverable per page."""
