"""Provides classes for representing the outcome of a store operation as a value.

The facade raises typed exceptions. Callers that would rather pattern match on an
outcome than wrap every call in `try`/`except` can evaluate an operation through a
`StoreResultBuilder` (see `docstore.checked.CheckedStore`), which captures the
outcome in a `StoreResult`.

Key Components:

-   `StoreResult[T]`: An abstract base class representing the outcome of an operation.
    It has two concrete subclasses:
    -   `StoreSuccess[T]`: Indicates a successful operation, holding its result.
    -   `StoreFailure[T]`: Indicates a failed operation, holding the exception.
-   `StoreResultBuilder[T]`: Defers a call and evaluates it with `get()`,
    `or_raise()` or `or_use()`.
-   `StoreNoResultException`: Raised when reading `.result` from a failure or
    `.exception` from a success.

Example:
    ```python
    match checked.insert({"_id": 1}).get():
        case StoreResult.StoreSuccess(inserted_id):
            print(f"Inserted {inserted_id}")
        case StoreResult.StoreFailure(StoreWriteFailed(details={"writeErrors": errors})):
            print(f"Rejected: {errors}")
        case StoreResult.StoreFailure(exception):
            print(f"Failed: {exception}")
    ```
"""
from abc import ABC, abstractmethod
from contextlib import suppress
from typing import Callable, Type

from docstore.exceptions import DocumentStoreError


class StoreNoResultException(Exception):
    """Exception raised when attempting to access a non-existent result or exception.

    This occurs if you try to access:
    -   `.result` on a `StoreFailure` instance (as failures don't have a result).
    -   `.exception` on a `StoreSuccess` instance (as successes don't have an exception).
    """
    pass


class StoreResult[T](ABC):
    """Abstract base class for representing the outcome of a store operation.

    Supports Python's `match/case` for pattern matching.

    Class Attributes:
        StoreSuccess (Type[StoreSuccess[T]]): Reference to the `StoreSuccess` class.
        StoreFailure (Type[StoreFailure[T]]): Reference to the `StoreFailure` class.
    """
    __match_args__ = ("result", "exception")

    StoreSuccess: "Type[StoreSuccess[T]]"
    StoreFailure: "Type[StoreFailure[T]]"

    def __init_subclass__(cls, **kwargs):
        """Registers `StoreSuccess` and `StoreFailure` on `StoreResult` for pattern matching convenience."""
        super().__init_subclass__(**kwargs)
        if cls.__name__ in StoreResult.__annotations__:
            setattr(StoreResult, cls.__name__, cls)

    @property
    @abstractmethod
    def result(self) -> T:
        """The successful result of the operation.

        Raises:
            StoreNoResultException: If called on `StoreFailure`.
        """
        ...

    @property
    @abstractmethod
    def exception(self) -> Exception:
        """The exception from a failed operation.

        Raises:
            StoreNoResultException: If called on `StoreSuccess`.
        """
        ...

    @abstractmethod
    def result_or[D](self, default: D) -> T | D:
        """Returns the operation result if successful, else a default."""
        ...

    @abstractmethod
    def exception_or[D](self, default: D) -> Exception | D:
        """Returns the exception if the operation failed, else a default."""
        ...

    @classmethod
    def build[**P](cls, callback: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> "StoreResultBuilder[T]":
        """Creates a `StoreResultBuilder` that will call `callback` when evaluated."""
        return StoreResultBuilder(callback, *args, **kwargs)


class StoreSuccess[T](StoreResult[T]):
    """Represents a successful store operation."""
    __match_args__ = ("result",)

    def __init__(self, result: T):
        self._result = result

    @property
    def exception(self) -> Exception:
        """Accessing `exception` on `StoreSuccess` raises `StoreNoResultException`."""
        raise StoreNoResultException("StoreResult does not wrap an exception")

    @property
    def result(self) -> T:
        return self._result

    def result_or[D](self, default: D) -> T:
        return self._result

    def exception_or[D](self, default: D) -> D:
        return default

    def __repr__(self):
        return f"{type(self).__name__}({self._result!r})"


class StoreFailure[T](StoreResult[T]):
    """Represents a failed store operation, capturing the exception."""
    __match_args__ = ("exception",)

    def __init__(self, exception: Exception):
        self._exception = exception

    @property
    def exception(self) -> Exception:
        return self._exception

    @property
    def result(self) -> T:
        """Accessing `result` on `StoreFailure` raises `StoreNoResultException`."""
        raise StoreNoResultException(
            f"StoreResult.{type(self).__name__} does not wrap a result, it only contains an exception"
        )

    def result_or[D](self, default: D) -> D:
        return default

    def exception_or[D](self, default: D) -> Exception:
        return self._exception

    def __repr__(self):
        return f"{type(self).__name__}({self._exception!r})"


class StoreResultBuilder[T]:
    """Defers a store call and captures its outcome.

    Nothing runs until one of the evaluation methods is called:

    -   `get()` runs the call and returns a `StoreSuccess` or `StoreFailure`.
    -   `or_raise()` runs the call and lets exceptions propagate.
    -   `or_use(default)` runs the call and returns `default` if it fails with a
        store error.

    Only `DocumentStoreError`s are captured. Anything else (a `TypeError` from a
    malformed argument, for instance) is a programming error and propagates.
    """
    def __init__(self, callback: Callable[..., T], *args, **kwargs):
        self._callback = callback
        self._args = args
        self._kwargs = kwargs

    def or_raise(self) -> T:
        """Runs the call and raises any exceptions directly."""
        return self._callback(*self._args, **self._kwargs)

    def or_use[D](self, default: D) -> T | D:
        """Runs the call, returning its result or `default` on a store failure."""
        with suppress(DocumentStoreError):
            return self.or_raise()

        return default

    def get(self) -> StoreResult[T]:
        """Runs the call and wraps the outcome."""
        try:
            return StoreResult.StoreSuccess(self.or_raise())
        except DocumentStoreError as e:
            return StoreResult.StoreFailure(e)
