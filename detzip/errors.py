class DetZipError(Exception):
    """Base class for detzip errors."""


# Input construction
class InvalidTimestamp(DetZipError):
    pass


class InvalidPath(DetZipError):
    pass


class PathTooLong(DetZipError):
    pass


class DuplicatePath(DetZipError):
    def __init__(self, path: str):
        super().__init__(f"Duplicate archive path: {path}")
        self.path = path


# Assembly
class EmptyArchive(DetZipError):
    pass


class ArchiveTooLarge(DetZipError):
    pass


# Verification
class Divergence(DetZipError):
    """Two builds that must agree produced different output."""

    def __init__(self, strategy_a: str, strategy_b: str, detail: str = ""):
        msg = f"Divergence between {strategy_a} and {strategy_b}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.strategy_a = strategy_a
        self.strategy_b = strategy_b
        self.detail = detail
