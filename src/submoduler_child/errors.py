"""Exception types for submoduler-child

The CLI catches SubmodulerError and reports it with exit status 1,
anything else is reported with its traceback logged at debug level.
"""


class SubmodulerError(Exception):
    """Base class for all submoduler-child errors"""


class ConfigError(SubmodulerError):
    """Missing or invalid .submoduler.yml, or a missing required option"""


class GitError(SubmodulerError):
    """Raised when a git command cannot be run or fails"""


class VersionError(SubmodulerError):
    """Raised when a version value or version file cannot be parsed"""


class ReleaseError(SubmodulerError):
    """Raised when a hosted release cannot be created"""


class SymlinkError(SubmodulerError):
    """Raised when the steering directory cannot be created"""
