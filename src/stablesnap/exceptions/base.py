class StablesnapError(Exception):
    """
    Base exception used as the parent class for all exceptions raised by this package.

    Calling code should catch `StablesnapError` and derived classes separately before general
    exceptions, e.g.:

    ```
    try:
        stablesnap.some_function()
    except SpecificStablesnapError:
        ... # handle a specific exception
    except StablesnapError:
        ... # handle non-specific stablesnap exception
    except Exception:
        ... # handle exceptions raised by 3rd party dependencies or Python built-ins
    ```

    An optional string-formatted message may be attached to the exception and retrieved by accessing
    the `.message` attribute.
    """

    message: str | None = None

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
            super().__init__(message)


class StablesnapValueError(StablesnapError): ...


class InvariantViolation(StablesnapError):
    """
    Raised when the lengths or shapes flowing between pipeline stages do not line up. This
    indicates a programming error, and should never be caught and ignored.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(message=f"Invariant violation: {detail}")

    def __reduce__(self) -> tuple[type["InvariantViolation"], tuple[str]]:
        return self.__class__, (self.detail,)
