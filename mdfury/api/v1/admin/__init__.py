from fastapi import APIRouter

# Create the admin router
router = APIRouter()

# Import all admin routers
from mdfury.api.v1.admin.invite_routes import router as invite_admin_router

# Include all admin routes
router.include_router(invite_admin_router)
