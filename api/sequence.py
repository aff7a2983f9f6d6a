"""Invoice counter endpoints under /api/sequence.

The counter file is fixed by configuration; requests can only choose the
scope, the date and the formatting of the number.
"""

import datetime as dt

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from api.base import success_response
from api.middleware import request_id_of
from core.models import Scope, SequenceOptions
from core.services.sequence_service import SequenceService


class CounterRequest(BaseModel):
    scope: Scope | None = None
    date: dt.date | None = None

    def to_options(self) -> SequenceOptions:
        return SequenceOptions(scope=self.scope, date=self.date)


class NextRequest(CounterRequest):
    pad: int | None = Field(None, ge=1, le=12)
    prefix: str | None = Field(None, max_length=50)

    def to_options(self) -> SequenceOptions:
        return SequenceOptions(scope=self.scope, date=self.date, pad=self.pad, prefix=self.prefix)


class SetRequest(CounterRequest):
    value: float = Field(..., allow_inf_nan=False)


def create_sequence_router(sequence: SequenceService) -> APIRouter:
    router = APIRouter()

    @router.get("/sequence")
    def peek(
        request: Request,
        scope: Scope | None = Query(None),
        date: dt.date | None = Query(None),
    ):
        result = sequence.peek(SequenceOptions(scope=scope, date=date))
        return success_response(result.model_dump(mode="json"), request_id_of(request)).model_dump(mode="json")

    @router.post("/sequence/next")
    def issue(request: Request, body: NextRequest | None = None):
        result = sequence.next((body or NextRequest()).to_options())
        return success_response(result.model_dump(mode="json"), request_id_of(request)).model_dump(mode="json")

    @router.post("/sequence/set")
    def force(request: Request, body: SetRequest):
        result = sequence.set(body.value, body.to_options())
        return success_response(result.model_dump(mode="json"), request_id_of(request)).model_dump(mode="json")

    @router.post("/sequence/reset")
    def reset(request: Request, body: CounterRequest | None = None):
        result = sequence.reset((body or CounterRequest()).to_options())
        return success_response(result.model_dump(mode="json"), request_id_of(request)).model_dump(mode="json")

    return router
