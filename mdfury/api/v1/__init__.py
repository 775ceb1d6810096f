from fastapi import APIRouter
from mdfury.api.v1.admin import router as admin_package_router
from mdfury.api.v1.auth import router as auth_router
from mdfury.api.v1.config_routes import router as config_router
from mdfury.api.v1.document_routes import router as document_router
from mdfury.api.v1.invitation_routes import router as invitation_router
from mdfury.api.v1.public_routes import router as public_router

# Create main router for v1 API
router = APIRouter()

# Include all routes
router.include_router(admin_package_router, prefix="/api/v1/admin")
router.include_router(auth_router)
router.include_router(config_router)
router.include_router(document_router)
router.include_router(invitation_router)
router.include_router(public_router)
