"""FastAPI routes for the customer's profile and account summary."""

from fastapi import APIRouter, Depends

from storefront.api.deps import current_customer
from storefront.api.responses import success
from storefront.api.schemas import UpdateProfileRequest
from storefront.api.serializers import account_summary_payload, profile_payload
from storefront.identity.profile import UpdateProfile, account_summary, load_customer
from storefront.shared.commands import dispatch

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("")
async def get_profile(customer_id: str = Depends(current_customer)):
    return success(profile_payload(load_customer(customer_id)))


@router.put("")
async def update_profile(body: UpdateProfileRequest, customer_id: str = Depends(current_customer)):
    command = UpdateProfile(customer_id=customer_id, **body.model_dump(exclude_none=True))
    dispatch(command)
    return success(profile_payload(load_customer(customer_id)), "Profile updated")


@router.get("/summary")
async def get_account_summary(customer_id: str = Depends(current_customer)):
    return success(account_summary_payload(account_summary(customer_id)))
