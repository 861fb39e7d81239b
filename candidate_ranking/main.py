from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from candidate_ranking.config import StoreConfig
from candidate_ranking.routers import candidates
from candidate_ranking.services.candidate_store import CandidateStore
from candidate_ranking.services.logger import AppLogger
import os

logger = AppLogger.get_logger(__name__)

origins = [
    "http://localhost:3000",
    "http://localhost:3001",
]

def create_app(store: Optional[CandidateStore] = None) -> FastAPI:
    """Create the FastAPI application around a candidate store"""
    candidate_store = store or CandidateStore(StoreConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not candidate_store.is_ready and not await candidate_store.initialize():
            # Caller owns retries; the API keeps serving and reports not-ready
            logger.error("Candidate store failed to initialize; write endpoints will return 503")
        yield
        candidate_store.close()

    app = FastAPI(
        title="Candidate Ranking API",
        description="Regional candidate rankings backed by Firestore",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.candidate_store = candidate_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])

    @app.get("/")
    async def root():
        return {"message": "Candidate Ranking API is running"}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy" if candidate_store.is_ready else "initializing",
            "ready": candidate_store.is_ready,
            "user_id": candidate_store.user_id,
        }

    return app

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("candidate_ranking.main:create_app", factory=True, host="0.0.0.0", port=port)
