from fastapi import APIRouter
from findx.api import auth, domains, resumes

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(domains.router, prefix="/domains", tags=["domains"])
api_router.include_router(resumes.router, prefix="/resumes", tags=["resumes"])
