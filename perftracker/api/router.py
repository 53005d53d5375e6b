from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
import orjson
from .schemas import IngestResponse, RevenueReportResponse
from ..event_models import RevenueEvent
from ..middleware.error_handler import InvalidJSONError
from ..services.query import QueryParams
from ..services.revenue_service import RevenueService

router = APIRouter(prefix="/api/track", tags=["revenue"])


def get_revenue_service(request: Request) -> RevenueService:
    return request.app.state.revenue_service


async def decode_revenue_event(request: Request) -> RevenueEvent:
    """Decode the raw body whatever its content type."""
    body = await request.body()
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise InvalidJSONError(str(e))

    try:
        return RevenueEvent.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


# Plain `def` endpoints run on the worker thread pool, one thread per request.
@router.post("/revenue", response_model=IngestResponse, status_code=201)
def track_revenue(
    event: RevenueEvent = Depends(decode_revenue_event),
    service: RevenueService = Depends(get_revenue_service),
):
    service.ingest(event)
    return IngestResponse(status="ok")


@router.get("/revenue", response_model=RevenueReportResponse)
def get_revenue(
    page: str | None = Query(None),
    page_size: str | None = Query(None, alias="pageSize"),
    utm_campaign: str | None = Query(None),
    period: str | None = Query(None, description='"7d", "30d" or "all"'),
    service: RevenueService = Depends(get_revenue_service),
):
    # Pagination values are parsed leniently and never rejected
    params = QueryParams.from_raw(
        page=page,
        page_size=page_size,
        utm_campaign=utm_campaign,
        period=period,
        default_page_size=service.default_page_size,
    )
    return RevenueReportResponse.from_result(service.query(params))
