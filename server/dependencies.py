"""FastAPI dependency providers.

Routes receive their collaborators through these functions so tests can swap
them with app.dependency_overrides.
"""

from fastapi import Depends

from orchestrator.sdk.model_provider import ChatModelClient, ModelCatalog
from orchestrator.sdk.persona_loader import PersonaLoader
from orchestrator.sdk.reconciler import WorkflowReconciler
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from orchestrator.utils.settings import SettingsResolver
from server import settings_db

# the model list cache has to outlive a single request
_model_catalog: ModelCatalog | None = None


def get_settings() -> SettingsResolver:
    return SettingsResolver(lookup=settings_db.get_value)


def get_directory(settings: SettingsResolver = Depends(get_settings)) -> WorkflowDirectory:
    return WorkflowDirectory(settings)


def get_reconciler(directory: WorkflowDirectory = Depends(get_directory)) -> WorkflowReconciler:
    return WorkflowReconciler(directory)


def get_model_client(settings: SettingsResolver = Depends(get_settings)) -> ChatModelClient:
    return ChatModelClient(settings)


def get_model_catalog() -> ModelCatalog:
    global _model_catalog
    if _model_catalog is None:
        _model_catalog = ModelCatalog(get_settings())
    return _model_catalog


def get_persona_loader() -> PersonaLoader:
    return PersonaLoader()
