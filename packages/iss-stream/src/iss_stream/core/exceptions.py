class StreamError(Exception):
    """Base stream exception."""


class UpstreamError(StreamError):
    """Raised when an upstream fetch cycle cannot produce an event."""


class UpstreamUnavailable(UpstreamError):
    """Raised on timeout, transport failure or an error HTTP status."""


class MalformedUpstreamResponse(UpstreamError):
    """Raised when the upstream body cannot be normalized."""


class MalformedEventError(StreamError):
    """Raised when a log payload does not match the wire event schema."""


class LogUnavailable(StreamError):
    """Raised when the durable log cannot be published to or consumed from."""


class BroadcastSendFailure(StreamError):
    """Raised when a single viewer connection cannot receive a frame."""
