from fastapi import APIRouter

from llm_gateway.api.v1.completions import router as completions_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(completions_router)
