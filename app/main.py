from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routers.pool_tokens import router as pool_tokens_router
from app.shared.config import get_settings

app = FastAPI(title="Loopring Explorer API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(pool_tokens_router)
