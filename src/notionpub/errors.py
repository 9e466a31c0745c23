"""Exceptions raised across the fetch -> normalize -> render pipeline"""


class UpstreamFetchError(RuntimeError):
    """The content source was unreachable or answered with an error.

    Fatal to the enclosing list/get call; never retried at this layer.
    """
