import logging
from typing import Optional

from fastapi import FastAPI, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cn_address_match.models import ErrorResponse, MatchRequest, MatchResult
from cn_address_match.matcher.division_loader import (
    AddressMatchingService,
    get_service,
)


class APIError(Exception):
    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        *,
        request_id: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.request_id = request_id
        self.details = details


app = FastAPI(
    title="CN Administrative Division Matching API",
    description=(
        "Match free-form (possibly partial or mistyped) Chinese administrative "
        "addresses to a reference set of province/city/district/street "
        "divisions.\n"
        "- Exact, prefix and pinyin homophone lookup (与杭 → 余杭).\n"
        "- Tolerates missing leading levels (余杭区仓前街道).\n"
        "- Flags inputs naming more than one province or city.\n\n"
        "将用户输入的中文行政区划地址匹配到标准的省/市/区/街道编码，"
        "支持同音错别字、缺省上级行政区，并对包含多个省份/城市的异常地址给出告警。"
    ),
    version="0.1.0",
)


@app.exception_handler(APIError)
async def handle_api_error(_, exc: APIError):
    payload = ErrorResponse(
        error=exc.error,
        message=exc.message,
        request_id=exc.request_id,
        details=exc.details,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(payload),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_, exc: RequestValidationError):
    payload = ErrorResponse(
        error="validation_error",
        message="Request body failed validation",
        details={"errors": exc.errors()},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(payload),
    )


logger = logging.getLogger(__name__)


@app.exception_handler(Exception)
async def handle_unexpected_error(_, exc: Exception):
    logger.exception("Unhandled application error: %s", exc)
    payload = ErrorResponse(
        error="internal_error",
        message="Internal server error",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder(payload),
    )


@app.get("/health")
def healthcheck(service: AddressMatchingService = Depends(get_service)):
    return {"ok": True, "divisions": len(service.index)}


@app.post(
    "/match",
    response_model=MatchResult,
    responses={
        status.HTTP_404_NOT_FOUND: {
            "model": ErrorResponse,
            "description": (
                "No administrative division found (blank address) / "
                "未找到行政区划"
            ),
        },
        status.HTTP_422_UNPROCESSABLE_ENTITY: {
            "model": ErrorResponse,
            "description": (
                "Validation error — request body failed schema checks / "
                "请求体验证失败"
            ),
        },
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ErrorResponse,
            "description": "Internal server error / 服务内部错误",
        },
    },
)
def match_endpoint(
    req: MatchRequest,
    service: AddressMatchingService = Depends(get_service),
) -> MatchResult:
    result = service.match_address(req.address)
    if result is None:
        raise APIError(
            status_code=status.HTTP_404_NOT_FOUND,
            error="no_match",
            message="no administrative division found / 未找到行政区划",
        )
    if result.abnormal:
        logger.warning("Abnormal address %r: %s", req.address, result.abnormal_reason)
    return result
