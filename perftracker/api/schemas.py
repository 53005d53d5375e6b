from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List
from ..event_models import RevenueEvent
from ..services.query import QueryResult

class IngestResponse(BaseModel):
    status: str = "ok"

class RevenueReportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[RevenueEvent]
    totals: Dict[str, float]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")

    @classmethod
    def from_result(cls, result: QueryResult) -> "RevenueReportResponse":
        return cls(
            data=result.data,
            totals=result.totals,
            total=result.total,
            page=result.page,
            page_size=result.page_size,
            total_pages=result.total_pages,
        )
