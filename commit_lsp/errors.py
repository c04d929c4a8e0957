"""Exception taxonomy for the issue tracker resolution pipeline.

Every error raised while resolving a tracker derives from CommitLspError so the
completion provider can catch the whole family at one boundary. Messages never
include credentials.
"""


class CommitLspError(Exception):
    """Base class for all recoverable pipeline errors."""


class ConfigError(CommitLspError):
    """A configuration file exists but could not be read or validated."""


# Resolution: which tracker applies to this repository.


class ResolutionError(CommitLspError):
    pass


class UnrecognizedUrlShape(ResolutionError):
    """The URL does not have the structure the tracker kind expects."""


class InvalidTrackerUrl(ResolutionError):
    """An issue_tracker_url override could not be parsed as a git URL."""


# Credentials: running the external credentials command.


class CredentialError(CommitLspError):
    pass


class CommandNotFound(CredentialError):
    pass


class AcquisitionFailed(CredentialError):
    pass


# Adapter construction: exchanging a credential for an authenticated client.


class AdapterError(CommitLspError):
    pass


class AuthenticationRejected(AdapterError):
    pass


class AdapterNetworkError(AdapterError):
    pass


# Fetch: tracker API failures after a successful build.


class FetchError(CommitLspError):
    pass


class Unauthorized(FetchError):
    pass


class NotFound(FetchError):
    pass


class FetchNetworkError(FetchError):
    pass


class RateLimited(FetchError):
    pass
