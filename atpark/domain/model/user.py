"""User profile projection."""

from atpark.domain.model.common import DomainModel


class User(DomainModel):
    """Profile of an account, keyed by DID.

    Login yields only ``did`` and ``handle``; the rest is best-effort
    enrichment from the profile endpoint.
    """

    did: str
    handle: str
    display_name: str | None = None
    avatar: str | None = None
