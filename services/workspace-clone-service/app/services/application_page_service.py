# services/workspace-clone-service/app/services/application_page_service.py
from __future__ import annotations

import logging

from app.db.application_repository import ApplicationRepository
from app.db.page_repository import PageRepository
from app.models import Application, ApplicationPage, Page

logger = logging.getLogger("app.services.application_page")


class ApplicationPageService:
    def __init__(self, applications: ApplicationRepository, pages: PageRepository) -> None:
        self.applications = applications
        self.pages = pages

    async def clone_example_application(self, application: Application) -> Application:
        """
        Write a new application shell from `application` (already re-parented by the
        caller). The shell starts with no page references; pages attach themselves
        through create_page().
        """
        shell = application.model_copy(update={"id": None, "policies": [], "pages": []})
        created = await self.applications.create(shell)
        logger.info("Application shell %s cloned from %s", created.id, application.id)
        return created

    async def create_page(self, page: Page) -> Page:
        """Write the page and append a non-default reference to its application."""
        created = await self.pages.create(page)
        await self.applications.push_page(created.application_id, ApplicationPage(id=created.id, is_default=False))
        return created

    async def make_page_default(self, page: Page) -> bool:
        ok = await self.applications.set_default_page(page.application_id, page.id)
        if not ok:
            logger.warning("Page %s is not referenced by application %s", page.id, page.application_id)
        return ok
