"""Provider base class carrying the component metadata used for mocking."""

from typing import ClassVar, Literal

from dishka import Provider

# Swappable infrastructure: the AT Protocol client and the upload path
Component = Literal["bluesky", "storage"]


class ProviderBase(Provider):
    """dishka provider tagged with the component it implements.

    Concrete providers leave ``__mock_component__`` unset. Component bases set
    it, and their subclasses set ``__is_mock__`` to say which variant they are.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
