"""FastAPI routes for the customer's address book."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_customer
from storefront.api.responses import success
from storefront.api.schemas import AddressRequest, UpdateAddressRequest
from storefront.api.serializers import address_payload
from storefront.identity.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from storefront.identity.customer import Customer
from storefront.shared.commands import dispatch

router = APIRouter(prefix="/addresses", tags=["addresses"])


def _addresses(customer_id):
    customer = current_domain.repository_for(Customer).get(customer_id)
    ordered = sorted(customer.addresses, key=lambda a: (not a.is_default, a.created_at))
    return [address_payload(a) for a in ordered]


@router.get("")
async def list_addresses(customer_id: str = Depends(current_customer)):
    return success(_addresses(customer_id))


@router.post("", status_code=201)
async def add_address(body: AddressRequest, customer_id: str = Depends(current_customer)):
    command = AddAddress(customer_id=customer_id, **body.model_dump(exclude_none=True))
    address_id = dispatch(command)
    return success({"address_id": address_id, "addresses": _addresses(customer_id)}, "Address added")


@router.put("/{address_id}")
async def update_address(
    address_id: str,
    body: UpdateAddressRequest,
    customer_id: str = Depends(current_customer),
):
    command = UpdateAddress(customer_id=customer_id, address_id=address_id, **body.model_dump(exclude_none=True))
    dispatch(command)
    return success(_addresses(customer_id), "Address updated")


@router.delete("/{address_id}")
async def remove_address(address_id: str, customer_id: str = Depends(current_customer)):
    dispatch(RemoveAddress(customer_id=customer_id, address_id=address_id))
    return success(_addresses(customer_id), "Address removed")


@router.post("/{address_id}/default")
async def set_default_address(address_id: str, customer_id: str = Depends(current_customer)):
    dispatch(SetDefaultAddress(customer_id=customer_id, address_id=address_id))
    return success(_addresses(customer_id), "Default address updated")
