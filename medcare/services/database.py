import logging

from fastapi import Request
from pymongo import AsyncMongoClient

from medcare.config import DATABASE_NAME, MONGODB_URI
from medcare.models.booking import BookingCRUD

logger = logging.getLogger(__name__)


class Database:
    """Owns the MongoDB client for the lifetime of the application"""

    def __init__(self, uri: str = MONGODB_URI, name: str = DATABASE_NAME):
        self.uri = uri
        self.name = name
        self.client: AsyncMongoClient = None
        self.database = None

    async def connect(self):
        """Create database connection"""

        self.client = AsyncMongoClient(self.uri, tz_aware=True)
        self.database = self.client[self.name]

        # Test the connection
        try:
            await self.client.admin.command("ping")
            logger.info(f"Successfully connected to MongoDB database {self.name}")

            await self.setup_indexes()

        except Exception as e:
            logger.error(f"Error connecting to MongoDB: {e}")

    async def setup_indexes(self):
        """Setup indexes backing the booking queries"""
        bookings_collection = self.database["bookings"]

        # Bookings of a user, newest first
        await bookings_collection.create_index([("user_email", 1), ("created_at", -1)])

        # Active bookings of a driver
        await bookings_collection.create_index([("driver_id", 1), ("status", 1)])

        # Pending bookings, newest first
        await bookings_collection.create_index([("status", 1), ("created_at", -1)])

        logger.info("Booking collection indexes created successfully")

    async def close(self):
        """Close database connection"""
        if self.client:
            await self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")


async def get_booking_crud(request: Request) -> BookingCRUD:
    return BookingCRUD(request.app.state.database.database)
