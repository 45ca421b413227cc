"""Base models for Kubernetes-shaped data structures."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class KubeBaseModel(BaseModel):
    """Base model whose fields read and write the API server's camelCase keys.

    Keys without a declared field are kept, so a view dumps back to the object
    it was built from.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_api_dict(self) -> dict:
        """Dump using the API server's key names, with only the fields that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True)
