"""Exception types raised while building package indexes."""

from typing import Optional


class PackageIndexError(Exception):
    """Base class for fatal index construction failures."""


class ArchiveStreamError(PackageIndexError):
    """The archive decoder stopped abnormally while traversing entries."""


class DescriptionParseError(PackageIndexError):
    """A package description could not be parsed."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class RepositoryIndexError(PackageIndexError):
    """Loading one repository's index failed; aborts the aggregate load."""

    def __init__(self, repo, message: str):
        self.repo = repo
        super().__init__(f"{repo.display_name}: {message}")


class InstalledPackageParseError(PackageIndexError):
    """An installed package record is missing required fields."""
