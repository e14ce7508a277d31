"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from staffing_crm.api.routes.auth_routes import router as auth_router
from staffing_crm.api.routes.user_routes import router as user_router
from staffing_crm.api.routes.customer_routes import router as customer_router
from staffing_crm.api.routes.project_routes import router as project_router
from staffing_crm.api.routes.candidate_routes import router as candidate_router
from staffing_crm.api.routes.engineer_routes import router as engineer_router
from staffing_crm.api.routes.project_candidate_routes import router as project_candidate_router
from staffing_crm.api.routes.project_talent_routes import router as project_talent_router
from staffing_crm.api.routes.matching_routes import router as matching_router
from staffing_crm.api.routes.notification_routes import router as notification_router
from staffing_crm.api.routes.activity_routes import router as activity_router
from staffing_crm.api.routes.search_routes import router as search_router
from staffing_crm.api.routes.upload_routes import router as upload_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(customer_router)
api_router.include_router(project_router)
api_router.include_router(candidate_router)
api_router.include_router(engineer_router)
api_router.include_router(project_candidate_router)
api_router.include_router(project_talent_router)
api_router.include_router(matching_router)
api_router.include_router(notification_router)
api_router.include_router(activity_router)
api_router.include_router(search_router)
api_router.include_router(upload_router)
