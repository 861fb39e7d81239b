# candidate_ranking/dependencies.py
from fastapi import Depends, HTTPException, Request
from candidate_ranking.services.candidate_store import CandidateStore

def get_candidate_store(request: Request) -> CandidateStore:
    """Return the process-wide candidate store created at startup"""
    return request.app.state.candidate_store

def get_ready_store(store: CandidateStore = Depends(get_candidate_store)) -> CandidateStore:
    """Candidate store that has finished signing in and listening"""
    if not store.is_ready:
        raise HTTPException(status_code=503, detail="Candidate store is not ready")
    return store
