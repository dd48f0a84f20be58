from fastapi import APIRouter

from .admin import router as admin_router
from .consultations import router as consultations_router
from .feedback import router as feedback_router
from .health import router as health_router
from .md_review import router as md_review_router
from .questions import router as questions_router
from .rate_limits import router as rate_limits_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(rate_limits_router)
router.include_router(questions_router)
router.include_router(consultations_router)
router.include_router(md_review_router)
router.include_router(admin_router)
router.include_router(feedback_router)
