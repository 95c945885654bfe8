"""
Status patch service for regindex.

Lets an external verifier annotate a tag with a review status, a
description and a link to its report. Status is free text.
"""

import logging
from typing import Union

from pydantic import BaseModel, ConfigDict, ValidationError

from ..database.store import CatalogStore
from ..errors import MalformedRequest

logger = logging.getLogger(__name__)


class TagStatusPatch(BaseModel):
    """PATCH body. Missing fields read as empty strings."""
    model_config = ConfigDict(strict=True)

    repository: str = ""
    tag: str = ""
    status: str = ""
    description: str = ""
    target_url: str = ""


class StatusPatchService:
    """Applies review-status patches to existing tags."""

    def __init__(self, store: CatalogStore):
        self.store = store

    @staticmethod
    def decode(body: Union[bytes, str]) -> TagStatusPatch:
        """
        Decode a PATCH body.

        Raises:
            MalformedRequest: if the body is not a JSON object of strings
        """
        try:
            return TagStatusPatch.model_validate_json(body)
        except ValidationError as e:
            raise MalformedRequest(str(e)) from e

    def set_tag_status(self, patch: TagStatusPatch) -> None:
        """
        Update status, description and target_url of a tag.

        Raises:
            NotFound: if the tag is not indexed
        """
        self.store.patch_tag_status(
            patch.repository,
            patch.tag,
            patch.status,
            patch.description,
            patch.target_url,
        )
        logger.info(f"{patch.repository}:{patch.tag} status set to {patch.status!r}")
