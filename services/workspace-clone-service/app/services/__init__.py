# services/workspace-clone-service/app/services/__init__.py
from .action_service import ActionService
from .application_page_service import ApplicationPageService
from .datasource_service import DatasourceService
from .template_config_service import TemplateConfigService
from .workspace_service import WorkspaceService

__all__ = [
    "ActionService",
    "ApplicationPageService",
    "DatasourceService",
    "TemplateConfigService",
    "WorkspaceService",
]
