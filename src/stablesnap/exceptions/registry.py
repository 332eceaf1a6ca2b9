from stablesnap.exceptions.base import StablesnapError


class RegistryError(StablesnapError):
    """
    Raised when a pool registry document cannot be read or fails validation.
    """
