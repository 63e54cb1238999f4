"""Domain service base."""


class Service:
    """Stateless-by-default logic over ports.

    Adapters raise ``DomainError``; a service turns it into a ``Failure``
    before returning, so callers only ever see results.
    """
