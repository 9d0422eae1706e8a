# services/workspace-clone-service/app/cloning/identity.py
from __future__ import annotations

from typing import TypeVar

from app.db.base_repository import new_entity_id
from app.models import BaseDocument, Page

D = TypeVar("D", bound=BaseDocument)


def make_pristine(entity: D) -> D:
    """
    Clear the identity (so the next create() allocates a new document instead of
    updating this one) and drop any access policies. Mutates and returns `entity`.
    """
    entity.id = None
    if entity.policies:
        entity.policies = []
    return entity


def regenerate_layout_ids(page: Page) -> Page:
    """Layouts always get fresh ids; their old ids mean nothing outside the source page."""
    page.layouts = [layout.model_copy(update={"id": new_entity_id()}) for layout in page.layouts]
    return page
