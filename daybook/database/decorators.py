#!/usr/bin/env python3
"""
decorators.py
--------------------
Shared decorators for database operations.
"""
from datetime import datetime
from functools import wraps
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from daybook.core.exceptions import DatabaseError


def log_database_operation(operation_name: str):
    """
    Decorator to log database operations with timing and context.

    The decorated method's owner must expose a `logger` attribute
    (a DaybookLogger or None).

    Args:
        operation_name: Name of the operation being logged

    Returns:
        Decorator function
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            start_time = datetime.now()
            operation_id = f"{operation_name}_{start_time.strftime('%Y%m%d_%H%M%S_%f')}"
            logger = getattr(self, "logger", None)

            if logger:
                logger.log_debug(
                    f"Starting {operation_name}",
                    {
                        "operation_id": operation_id,
                        "args_count": len(args),
                        "kwargs_keys": list(kwargs.keys()),
                    },
                )

            try:
                result = function(self, *args, **kwargs)

                duration = (datetime.now() - start_time).total_seconds()
                if logger:
                    logger.log_operation(
                        f"{operation_name}_completed",
                        {
                            "operation_id": operation_id,
                            "duration_seconds": duration,
                            "success": True,
                        },
                    )

                return result

            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                if logger:
                    logger.log_error(
                        e,
                        {
                            "operation": operation_name,
                            "operation_id": operation_id,
                            "duration_seconds": duration,
                        },
                    )
                raise

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Decorator translating SQLAlchemy failures into DatabaseError.

    Domain exceptions (validation, not-found, serialization) propagate
    unchanged.

    Args:
        function: Function to wrap

    Returns:
        Wrapped function with error handling
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except IntegrityError as e:
            raise DatabaseError(f"Data integrity violation: {e}")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Database operation failed: {e}")

    return wrapper
