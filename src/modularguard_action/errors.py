# modularguard_action/errors.py


class ModularGuardActionError(Exception):
    """
    Base class for every failure raised by the action.
    """


class ContextError(ModularGuardActionError):
    """
    Required workflow context or action input is missing or malformed.
    """


class AcquisitionError(ModularGuardActionError):
    """
    The ModularGuard binary could not be resolved, downloaded or extracted.
    """


class ExecutionError(ModularGuardActionError):
    """
    The ModularGuard process could not be started.
    """


class OutputError(ModularGuardActionError):
    """
    The ModularGuard process produced empty, invalid or incomplete output.
    """


class PublicationError(ModularGuardActionError):
    """
    A comment or check run could not be published.
    """
