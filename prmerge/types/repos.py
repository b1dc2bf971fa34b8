"""Repository-related data models."""

from dataclasses import dataclass

from prmerge.types.pulls import MergeMethod


@dataclass(frozen=True)
class Repository:
    """Repository that owns the pull request's base branch."""

    owner: str
    name: str
    host: str = "github.com"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, value: str, host: str = "github.com") -> "Repository":
        """
        Parse ``OWNER/REPO`` or ``HOST/OWNER/REPO``.

        Raises:
            ValueError: If the value does not have two or three non-empty parts
        """
        parts = value.strip().strip("/").split("/")
        if len(parts) == 3:
            host, owner, name = parts
        elif len(parts) == 2:
            owner, name = parts
        else:
            raise ValueError(f"expected the \"[HOST/]OWNER/REPO\" format, got {value!r}")
        if not owner or not name or not host:
            raise ValueError(f"expected the \"[HOST/]OWNER/REPO\" format, got {value!r}")
        return cls(owner=owner, name=name, host=host)


@dataclass(frozen=True)
class RepositoryMergeCapabilities:
    """Merge methods the repository allows, plus the merge queue's fixed method."""

    merge_commit_allowed: bool
    rebase_merge_allowed: bool
    squash_merge_allowed: bool
    merge_queue_method: MergeMethod | None = None

    def allowed_methods(self) -> list[MergeMethod]:
        """Allowed methods in presentation order: merge, rebase, squash."""
        methods = []
        if self.merge_commit_allowed:
            methods.append(MergeMethod.MERGE)
        if self.rebase_merge_allowed:
            methods.append(MergeMethod.REBASE)
        if self.squash_merge_allowed:
            methods.append(MergeMethod.SQUASH)
        return methods
