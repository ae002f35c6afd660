
from fastapi import APIRouter, File, Header, HTTPException, Request, UploadFile, status

from autonomy_gate.core.config import settings
from autonomy_gate.core.rate_limit import rate_limit
from autonomy_gate.core.security import check_api_key
from autonomy_gate.parsing.parse import SUPPORTED_EXTENSIONS, parse_document_bytes
from autonomy_gate.schemas.candidate import (
    CandidateSignals,
    CandidateSignalsRequest,
    EvaluateCandidateRequest,
    EvaluateCandidateResponse,
    ExtractDocumentResponse,
)
from autonomy_gate.services.evaluation_llm import EvaluationLLMError
from autonomy_gate.services.evaluation_service import evaluate_candidate
from autonomy_gate.services.evidence import analyze_candidate

router = APIRouter()

_READ_CHUNK_BYTES = 1024 * 64


def _raise_llm_http_error(exc: EvaluationLLMError) -> None:
    if exc.code == "llm_disabled":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


async def _read_upload(file: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/candidates/signals", response_model=CandidateSignals)
@rate_limit()
async def candidate_signals(
    request: Request,
    payload: CandidateSignalsRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    return analyze_candidate(payload.text, payload.hyperlinks)


@router.post("/candidates/extract", response_model=ExtractDocumentResponse)
@rate_limit()
async def candidate_extract(
    request: Request,
    file: UploadFile = File(...),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    filename = file.filename or "uploaded-file"
    ext = ("." + filename.rsplit(".", 1)[-1].lower()) if "." in filename else ""
    if ext not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(SUPPORTED_EXTENSIONS))}.",
        )

    content = await _read_upload(file)
    parsed = parse_document_bytes(content, filename)
    if not parsed.text.strip():
        detail = parsed.parsing_warnings[0] if parsed.parsing_warnings else "No extractable text found."
        raise HTTPException(status_code=422, detail=detail)

    return ExtractDocumentResponse(
        doc_id=parsed.doc_id,
        source_type=parsed.source_type,
        text=parsed.text,
        hyperlinks=parsed.hyperlinks,
        warnings=parsed.parsing_warnings,
        signals=analyze_candidate(parsed.text, parsed.hyperlinks),
    )


@router.post("/candidates/evaluate", response_model=EvaluateCandidateResponse)
@rate_limit()
async def candidate_evaluate(
    request: Request,
    payload: EvaluateCandidateRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    try:
        outcome = await evaluate_candidate(payload)
    except EvaluationLLMError as exc:
        _raise_llm_http_error(exc)
    return EvaluateCandidateResponse(
        result=outcome.result,
        evidence=outcome.evidence_summary(),
        cached=outcome.cached,
    )
