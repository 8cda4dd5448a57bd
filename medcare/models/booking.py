import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from medcare.errors import StorageError
from medcare.models import PyObjectId

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking status enumeration"""

    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses shown in a driver's dispatch view
ACTIVE_STATUSES = [BookingStatus.ACCEPTED.value, BookingStatus.IN_PROGRESS.value]


class BookingBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    user_email: str = Field(..., min_length=1)
    pickup: str = Field(..., min_length=1)

    # Optional fields
    user_name: Optional[str] = None
    destination: Optional[str] = None
    patient_name: Optional[str] = None
    patient_contact: Optional[str] = None
    priority: Optional[str] = None  # free-form severity, e.g. "critical"
    ambulance_type: Optional[str] = None
    additional_info: Optional[str] = None


class BookingCreate(BookingBase):
    """Request body for a new booking"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "userEmail": "jane@example.com",
                "userName": "Jane Doe",
                "pickup": "12 Main St",
                "destination": "City General Hospital",
                "patientName": "John Doe",
                "patientContact": "+1 555 0100",
                "priority": "high",
                "ambulanceType": "advanced",
                "additionalInfo": "Patient uses a wheelchair",
            }
        }
    )


class Booking(BookingBase):
    """Booking model representing a persisted transport booking"""

    model_config = ConfigDict(extra="ignore")

    id: PyObjectId = Field(
        ..., validation_alias=AliasChoices("_id", "id"), serialization_alias="id"
    )
    status: BookingStatus = Field(default=BookingStatus.PENDING)
    driver_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StatusUpdate(BaseModel):
    """Request body for a raw status change"""

    model_config = ConfigDict(extra="forbid")

    status: BookingStatus


class AcceptRequest(BaseModel):
    """Request body for a driver accepting a booking"""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )

    driver_id: str = Field(..., min_length=1)


@contextmanager
def storage_errors():
    """Surface any store failure as a StorageError"""
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Storage failure: {e}")
        raise StorageError(str(e)) from e


def to_object_id(booking_id: str) -> ObjectId:
    try:
        return ObjectId(booking_id)
    except InvalidId as e:
        raise StorageError(str(e)) from e


class BookingCRUD:
    def __init__(self, database):
        self.collection = database["bookings"]

    async def create_booking(self, booking: BookingCreate) -> Booking:
        """Create a new booking"""
        now = datetime.now(timezone.utc)
        booking_dict = booking.model_dump(exclude_none=True)
        booking_dict.update(
            {
                "status": BookingStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            }
        )

        with storage_errors():
            result = await self.collection.insert_one(booking_dict)
            created_booking = await self.collection.find_one(
                {"_id": result.inserted_id}
            )

        logger.info(f"Created booking {result.inserted_id} for {booking.user_email}")
        return Booking.model_validate(created_booking)

    async def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        """Get a booking by ID"""
        object_id = to_object_id(booking_id)

        with storage_errors():
            booking_dict = await self.collection.find_one({"_id": object_id})

        if booking_dict:
            return Booking.model_validate(booking_dict)
        return None

    async def _find_bookings(self, query: dict) -> List[Booking]:
        """Find bookings matching a query, newest first"""
        bookings = []
        with storage_errors():
            cursor = self.collection.find(query).sort("created_at", -1)
            async for booking_dict in cursor:
                bookings.append(Booking.model_validate(booking_dict))
        return bookings

    async def get_bookings_by_user(self, email: str) -> List[Booking]:
        """Get all bookings for a user"""
        return await self._find_bookings({"user_email": email})

    async def get_bookings_by_driver(self, driver_id: str) -> List[Booking]:
        """Get the active bookings assigned to a driver"""
        return await self._find_bookings(
            {"driver_id": driver_id, "status": {"$in": ACTIVE_STATUSES}}
        )

    async def get_pending_bookings(self) -> List[Booking]:
        """Get all bookings waiting for a driver"""
        return await self._find_bookings({"status": BookingStatus.PENDING.value})

    async def update_booking(self, booking_id: str, fields: dict) -> Optional[Booking]:
        """Set fields on a booking and return it as stored after the update"""
        object_id = to_object_id(booking_id)

        update_dict = dict(fields)
        update_dict["updated_at"] = datetime.now(timezone.utc)

        with storage_errors():
            updated_booking = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_dict},
                return_document=ReturnDocument.AFTER,
            )

        if updated_booking:
            logger.info(f"Updated booking {booking_id}: {fields}")
            return Booking.model_validate(updated_booking)
        return None

    async def update_status(
        self, booking_id: str, status: BookingStatus
    ) -> Optional[Booking]:
        """Update the status of a booking, any status may follow any other"""
        return await self.update_booking(booking_id, {"status": status.value})

    async def accept_booking(self, booking_id: str, driver_id: str) -> Optional[Booking]:
        """Assign a driver and mark the booking accepted in one update"""
        return await self.update_booking(
            booking_id,
            {"status": BookingStatus.ACCEPTED.value, "driver_id": driver_id},
        )
