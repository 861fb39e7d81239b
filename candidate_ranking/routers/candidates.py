# candidate_ranking/routers/candidates.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from candidate_ranking.dependencies import get_candidate_store, get_ready_store
from candidate_ranking.schemas.candidate import CandidateCreate
from candidate_ranking.services.candidate_store import CandidateStore

router = APIRouter()

@router.get("/")
async def get_candidates(store: CandidateStore = Depends(get_candidate_store)):
    """Get every candidate in the local mirror"""
    return store.get_all_data()

@router.delete("/")
async def clear_candidates(store: CandidateStore = Depends(get_ready_store)):
    """Delete all candidates for the signed-in user"""
    if not await store.clear_all():
        raise HTTPException(status_code=500, detail="Failed to clear candidates")
    return {"status": "success", "message": "All candidates cleared"}

@router.get("/regions/{region}")
async def get_region(region: str, store: CandidateStore = Depends(get_candidate_store)):
    """Get a region's candidates grouped by category, highest score first"""
    return store.get_region_data(region)

@router.post("/regions/{region}", status_code=201)
async def add_candidate(
    region: str,
    candidate: CandidateCreate,
    store: CandidateStore = Depends(get_ready_store)
):
    """Add a candidate to a region"""
    if not await store.add_candidate(region, candidate):
        raise HTTPException(status_code=500, detail="Failed to add candidate")
    return {"status": "success", "message": f"Candidate '{candidate.name}' added to region {region}"}

@router.post("/restore")
async def restore_candidates(request: Request, store: CandidateStore = Depends(get_ready_store)):
    """Replace all candidates with the contents of a JSON backup"""
    payload = await request.body()
    if not await store.restore_data(payload):
        raise HTTPException(status_code=400, detail="Restore failed. Expected a JSON array of candidates.")
    return {"status": "success", "message": "Candidates restored"}

@router.get("/export/json")
async def export_json(store: CandidateStore = Depends(get_candidate_store)):
    """Download the candidates as a JSON backup"""
    return Response(
        content=store.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="candidates.json"'},
    )

@router.get("/export/csv")
async def export_csv(store: CandidateStore = Depends(get_candidate_store)):
    """Download the candidates as CSV"""
    return Response(
        content=store.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="candidates.csv"'},
    )
