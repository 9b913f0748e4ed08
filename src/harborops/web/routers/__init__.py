from harborops.web.routers.metadata import router as metadata_router
from harborops.web.routers.presets import router as presets_router
from harborops.web.routers.resources import router as resources_router

__all__ = [
    "metadata_router",
    "presets_router",
    "resources_router",
]
