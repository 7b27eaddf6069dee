"""
Error taxonomy shared by the seed registry, pair history and pair formation.

Infrastructure failures are not wrapped: they surface as
sqlalchemy.exc.SQLAlchemyError on write paths.
"""


class PairingError(Exception):
    """Base class for domain errors raised by the pairing services"""

    pass


class InvalidStateError(PairingError):
    """A structural precondition is violated (odd roster, gender mismatch, too many seeds)"""

    pass


class ConflictError(PairingError):
    """An active seed designation already exists for the participant"""

    pass


class NotFoundError(PairingError):
    """The referenced seed designation or pair does not exist"""

    pass
