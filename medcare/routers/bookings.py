from typing import List

from fastapi import APIRouter, Depends, status

from medcare.errors import NotFoundError
from medcare.models.booking import (
    AcceptRequest,
    Booking,
    BookingCreate,
    BookingCRUD,
    BookingStatus,
    StatusUpdate,
)
from medcare.services.database import get_booking_crud

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def found(booking):
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking: BookingCreate, crud: BookingCRUD = Depends(get_booking_crud)
):
    """Create a new booking"""
    return await crud.create_booking(booking)


# Fixed paths are registered ahead of /{booking_id}


@router.get("/status/pending", response_model=List[Booking])
async def get_pending_bookings(crud: BookingCRUD = Depends(get_booking_crud)):
    """Get all pending bookings, newest first"""
    return await crud.get_pending_bookings()


@router.get("/user/{email}", response_model=List[Booking])
async def get_user_bookings(email: str, crud: BookingCRUD = Depends(get_booking_crud)):
    """Get all bookings for a user, newest first"""
    return await crud.get_bookings_by_user(email)


@router.get("/driver/{driver_id}", response_model=List[Booking])
async def get_driver_bookings(
    driver_id: str, crud: BookingCRUD = Depends(get_booking_crud)
):
    """Get the accepted and in-progress bookings of a driver, newest first"""
    return await crud.get_bookings_by_driver(driver_id)


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, crud: BookingCRUD = Depends(get_booking_crud)):
    """Get a booking by ID"""
    return found(await crud.get_booking_by_id(booking_id))


@router.put("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: str,
    update: StatusUpdate,
    crud: BookingCRUD = Depends(get_booking_crud),
):
    """Set the status of a booking"""
    return found(await crud.update_status(booking_id, update.status))


@router.put("/{booking_id}/accept", response_model=Booking)
async def accept_booking(
    booking_id: str,
    request: AcceptRequest,
    crud: BookingCRUD = Depends(get_booking_crud),
):
    """Assign a driver to a booking"""
    return found(await crud.accept_booking(booking_id, request.driver_id))


@router.put("/{booking_id}/start", response_model=Booking)
async def start_booking(booking_id: str, crud: BookingCRUD = Depends(get_booking_crud)):
    """Mark a booking as in progress"""
    return found(await crud.update_status(booking_id, BookingStatus.IN_PROGRESS))


@router.put("/{booking_id}/complete", response_model=Booking)
async def complete_booking(
    booking_id: str, crud: BookingCRUD = Depends(get_booking_crud)
):
    """Mark a booking as completed"""
    return found(await crud.update_status(booking_id, BookingStatus.COMPLETED))


@router.put("/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(booking_id: str, crud: BookingCRUD = Depends(get_booking_crud)):
    """Cancel a booking"""
    return found(await crud.update_status(booking_id, BookingStatus.CANCELLED))
