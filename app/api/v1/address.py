from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_user
from app.core.rate_limit import address_limiter
from app.models.database import get_db
from app.models.user import User
from app.schemas.address import REQUIRED_ADDRESS_FIELDS, AddressResponse, AddressUpdate
from app.schemas.common import ErrorResponse
from app.services.address_service import address_view, build_user_address

router = APIRouter()


@router.put(
    "/address",
    response_model=AddressResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Save delivery address",
    description=(
        "Store the caller's address. Without coordinates the address is "
        "geocoded; if that fails it is saved without coordinates."
    ),
)
async def update_address(
    body: AddressUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    address_limiter.check(request)

    missing = body.address.missing_fields() if body.address else list(REQUIRED_ADDRESS_FIELDS)
    if missing:
        error = ErrorResponse(
            message="Street, city, and state are required",
            required=list(REQUIRED_ADDRESS_FIELDS),
            errors=[f"Missing field: {name}" for name in missing],
            can_retry=False,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error.model_dump(by_alias=True, exclude_none=True),
        )

    address = await build_user_address(body.address, body.coordinates)
    user.address = address
    await db.commit()

    return AddressResponse(message="Address updated successfully", address=address_view(address))


@router.get(
    "/address",
    response_model=AddressResponse,
    summary="Get delivery address",
)
async def get_address(user: User = Depends(get_current_user)):
    if not user.address:
        return AddressResponse(message="No address found", address=None, has_address=False)
    return AddressResponse(
        message="Address retrieved successfully", address=address_view(user.address)
    )
