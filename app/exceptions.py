from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from typing import Any, Callable, List, Optional


class APIException(Exception):
    """ Base class for all exceptions in the TechFix API. """

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail


class BookingValidationException(APIException):
    """ Exception is raised when a booking is submitted with required fields missing or an invalid selection. """

    def __init__(self, detail: Optional[str] = None, missing_fields: Optional[List[str]] = None):
        super().__init__(detail)
        self.missing_fields = missing_fields or []


class CouponInvalidException(APIException):
    """ Exception is raised when a coupon code is unknown, inactive or outside its validity window. """
    pass


class CouponLimitReachedException(APIException):
    """ Exception is raised when a coupon has been used as many times as it allows. """
    pass


class StoreException(APIException):
    """ Exception is raised when the database rejects a read or a write. """
    pass


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestException(HTTPException):
    def __init__(self, detail: str = "Bad request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ForbiddenException(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictException(HTTPException):
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


def create_exception_handler(status_code: int, title: str, detail: Any) -> Callable[[Request, Exception], JSONResponse]:
    """
    Build a handler that renders an exception as a destructive toast payload.

    The exception's own ``detail`` wins over the default one when it carries one.
    Store errors never carry one; the database message only goes to the log.
    """

    async def exception_handler(request: Request, exception: APIException):
        content = {
            "title": title,
            "detail": getattr(exception, "detail", None) or detail,
            "variant": "destructive",
        }
        missing_fields = getattr(exception, "missing_fields", None)
        if missing_fields:
            content["missing_fields"] = missing_fields

        return JSONResponse(
            content=content,
            status_code=status_code
        )

    return exception_handler
