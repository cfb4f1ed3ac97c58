import logging

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from wordgen.errors import InvalidInput, WordGenError
from wordgen.models import ErrorInfo, ValidationResult, WordGenerationResponse, WordRequest
from wordgen.service.coordinator import GenerationCoordinator, build_coordinator

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Word Generation API")

ERROR_STATUS = {
    "INVALID_INPUT": 400,
    "MEMORY_LIMIT_EXCEEDED": 422,
    "GENERATION_TIMEOUT": 504,
}

_coordinator: GenerationCoordinator | None = None


def get_coordinator() -> GenerationCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = build_coordinator()
    return _coordinator


@app.exception_handler(RequestValidationError)
async def invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "malformed request"
    body = WordGenerationResponse(success=False, error=ErrorInfo(code=InvalidInput.code, message=message))
    return JSONResponse(status_code=400, content=body.model_dump(mode="json", by_alias=True))


class DictionaryValidationResponse(BaseModel):
    result: ValidationResult
    warning: ErrorInfo | None = None


@app.post("/words/generate", response_model=WordGenerationResponse)
def generate_words(request: WordRequest, response: Response) -> WordGenerationResponse:
    result = get_coordinator().generate(request)
    if not result.success and result.error is not None:
        response.status_code = ERROR_STATUS.get(result.error.code, 500)
    return result


@app.get("/dictionary/validate", response_model=DictionaryValidationResponse)
def validate_word(
    word: str = Query(..., min_length=1, max_length=64),
    language: str = Query("en", min_length=2, max_length=5),
) -> DictionaryValidationResponse:
    try:
        result, warning = get_coordinator().validate_word(word, language)
    except WordGenError as exc:
        raise HTTPException(
            status_code=ERROR_STATUS.get(exc.code, 500),
            detail={"code": exc.code, "message": exc.message},
        ) from exc
    return DictionaryValidationResponse(result=result, warning=warning)


@app.get("/health")
def health() -> dict:
    return get_coordinator().health()
