from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.core.exceptions import AppError, DatabaseError
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation and error handling,
    and owns the transaction boundary for the repositories it uses.
    """

    def __init__(self, session: Optional[AsyncSession] = None):
        """Initialize the service.

        Args:
            session: Database session shared by the service's repositories
        """
        self.session = session
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> Any:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution
        3. Standardized error handling

        Raises:
            AppError: If execution fails
        """
        try:
            self.validate(*args, **kwargs)
            return await self.run(*args, **kwargs)

        except AppError:
            raise

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e)

    def validate(self, *args, **kwargs):
        """Validate service input.

        Override this method to implement custom validation logic.

        Raises:
            ValidationError: If input is invalid
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass

    @asynccontextmanager
    async def unit_of_work(self, operation: str) -> AsyncIterator[None]:
        """Commit on success, roll back on any failure.

        Args:
            operation: Short description used in logs and error messages

        Raises:
            DatabaseError: If SQLAlchemy fails while flushing or committing
        """
        try:
            yield
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Database error during {operation}: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise DatabaseError(f"Failed to {operation}", original_error=e)
        except Exception:
            await self.session.rollback()
            raise
