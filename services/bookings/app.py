from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from common.config import get_settings
from common.errors import Rejection, RejectionCode
from common.logging_middleware import add_audit_middleware
from common.rate_limit import apply_rate_limiter, booking_write_limit, limiter
from common.schemas import Booking, BookingDeletionResult, CreateBookingRequest, ServicePing
from common.store import BookingStore

from .service import BookingService

settings = get_settings()
router = APIRouter(prefix="/rooms/{room_id}/bookings", tags=["bookings"])


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def rejection_response(rejection: Rejection) -> JSONResponse:
    return JSONResponse(status_code=rejection.status_code, content=rejection.model_dump(mode="json"))


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Request body is invalid"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid value')}"
    return rejection_response(Rejection.of(RejectionCode.VALIDATION_ERROR, message))


@router.get("", response_model=List[Booking])
def list_bookings(
    request: Request,
    room_id: str,
    service: BookingService = Depends(get_booking_service),
) -> List[Booking]:
    return service.list_bookings(room_id)


@router.post(
    "",
    response_model=Booking,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": Rejection},
        status.HTTP_409_CONFLICT: {"model": Rejection},
    },
)
@limiter.limit(booking_write_limit)
def create_booking(
    request: Request,
    room_id: str,
    booking_in: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    result = service.request_booking(room_id, booking_in.start_time, booking_in.end_time)
    if isinstance(result, Rejection):
        return rejection_response(result)
    return result


@router.delete(
    "/{booking_id}",
    response_model=BookingDeletionResult,
    responses={status.HTTP_404_NOT_FOUND: {"model": Rejection}},
)
@limiter.limit(booking_write_limit)
def cancel_booking(
    request: Request,
    room_id: str,
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    result = service.cancel_booking(room_id, booking_id)
    if isinstance(result, Rejection):
        return rejection_response(result)
    return result


def create_app(store: Optional[BookingStore] = None) -> FastAPI:
    """Build the bookings app around an explicitly owned store."""

    fastapi_app = FastAPI(
        title=settings.app_name,
        description="List, create and cancel meeting room bookings",
        version=settings.app_version,
    )
    fastapi_app.state.booking_service = BookingService(store if store is not None else BookingStore())
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    fastapi_app.add_exception_handler(RequestValidationError, validation_error_handler)

    @fastapi_app.get("/health", response_model=ServicePing, tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": "bookings"}

    fastapi_app.include_router(router)
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()
