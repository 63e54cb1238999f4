"""Where a DID's repository lives, read from the DID document returned at login."""

from pydantic import BaseModel, ConfigDict, Field

PDS_SERVICE_TYPE = "AtprotoPersonalDataServer"


class DIDService(BaseModel):
    """One ``service`` entry of a DID document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    type: str = ""
    endpoint: str = Field(default="", alias="serviceEndpoint")


class DIDDocument(BaseModel):
    """The part of a DID document used to route repository calls.

    ``alsoKnownAs`` carries the handle as ``at://<handle>``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    also_known_as: list[str] = Field(default_factory=list, alias="alsoKnownAs")
    service: list[DIDService] = Field(default_factory=list)

    @property
    def handle(self) -> str | None:
        for alias in self.also_known_as:
            if alias.startswith("at://"):
                return alias[len("at://") :]
        return None


class IdentityResolutionError(Exception):
    """The DID document does not say where the repository lives."""

    pass


def get_pds_endpoint(did_document: DIDDocument) -> str:
    """Return the first PDS endpoint of ``did_document``, without trailing slash.

    Raises:
        IdentityResolutionError: If no service entry is a PDS with an endpoint
    """
    endpoint = next(
        (
            s.endpoint
            for s in did_document.service
            if s.type == PDS_SERVICE_TYPE and s.endpoint
        ),
        None,
    )
    if endpoint is None:
        raise IdentityResolutionError(
            f"No PDS endpoint found in DID document for {did_document.id}"
        )
    return endpoint.rstrip("/")
