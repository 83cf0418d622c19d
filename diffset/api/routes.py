from fastapi import APIRouter, Depends, HTTPException, Request

from diffset.domain.schemas.diff import (
    DiffFileDetail,
    DiffFileRequest,
    DiffRequest,
    DiffResponse,
)
from diffset.services.diff_service import DiffService


router = APIRouter()
_service = DiffService()


def get_diff_service() -> DiffService:
    return _service


def _record_compare(request: Request, req: DiffRequest) -> None:
    # picked up by RequestContextMiddleware for the request log line
    request.state.compare = f"{req.from_ref or 'HEAD'}..{req.to_ref or 'worktree'}"
    request.state.filter = req.path
    request.state.files = None


@router.get("/health")
async def health():
    return {"ok": True}


@router.get("/schema/diff")
async def diff_schema():
    return {
        "request": DiffRequest.model_json_schema(),
        "response": DiffResponse.model_json_schema(),
        "file": DiffFileDetail.model_json_schema(),
    }


@router.post("/diff", response_model=DiffResponse)
def diff(req: DiffRequest, request: Request, service: DiffService = Depends(get_diff_service)):
    _record_compare(request, req)
    res = service.summarize(req.from_ref, req.to_ref, req.path)
    request.state.files = res.size
    return res


@router.post("/diff/file", response_model=DiffFileDetail)
def diff_file(req: DiffFileRequest, request: Request, service: DiffService = Depends(get_diff_service)):
    _record_compare(request, req)
    detail = service.file_detail(req.file, req.from_ref, req.to_ref, req.path)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"No diff for {req.file}")
    request.state.files = 1
    return detail
