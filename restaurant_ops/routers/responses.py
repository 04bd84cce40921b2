"""
Service result -> HTTP mapping

Successful results become an ``ApiResponse`` envelope. Failed results are
raised as ``HTTPException`` with a status picked from the error kind,
unless the route overrides it for expected failures. Infrastructure
faults are always 500 and only show diagnostic detail in debug mode.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Query, status

from restaurant_ops.core.config import get_settings
from restaurant_ops.core.errors import ErrorKind, ServiceResult
from restaurant_ops.schemas import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    ApiResponse,
    PageParams,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.INFRASTRUCTURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_failure(result: ServiceResult, failure_status: Optional[int] = None) -> None:
    """Raise the HTTPException matching a failed result; no-op on success."""
    if result.success:
        return

    if result.error == ErrorKind.INFRASTRUCTURE:
        detail = result.message
        if get_settings().debug and result.errors:
            detail = f"{detail}: {'; '.join(result.errors)}"
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

    status_code = failure_status or STATUS_BY_KIND.get(result.error, status.HTTP_400_BAD_REQUEST)
    detail = result.message
    if result.error == ErrorKind.VALIDATION and result.errors:
        detail = f"{detail}: {'; '.join(result.errors)}"
    raise HTTPException(status_code=status_code, detail=detail)


def respond(result: ServiceResult, failure_status: Optional[int] = None) -> ApiResponse:
    raise_for_failure(result, failure_status)
    return ApiResponse(success=True, message=result.message, data=result.data)


def page_params(
    page_number: int = Query(DEFAULT_PAGE_NUMBER, description="1-based page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description="Items per page (max 100)"),
    sort_by: Optional[str] = Query(None, description="Column to sort by"),
    descending: bool = Query(False),
) -> PageParams:
    """Query-string pagination; out-of-range values are clamped."""
    return PageParams(
        page_number=page_number,
        page_size=page_size,
        sort_by=sort_by,
        descending=descending,
    )
