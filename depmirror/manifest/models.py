"""
Manifest Models — Pydantic schemas for Glide's files.

- glide.yaml: the project manifest (direct dependencies)
- glide.lock: the lock document (every pinned dependency)

Field aliases match the YAML keys Glide reads and writes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _compact(data: Dict[str, Any], keep: Iterable[str] = ()) -> Dict[str, Any]:
    """Drop empty values the way Glide's omitempty tags do."""
    keep = set(keep)
    return {
        key: value
        for key, value in data.items()
        if key in keep or value not in (None, "", [], {})
    }


class _GlideModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_lists(cls, value: Any, info) -> Any:
        # "subpackages:" with no items loads as None
        field = cls.model_fields.get(info.field_name)
        if value is None and field is not None and field.default_factory is list:
            return []
        # YAML reads versions such as 1.2 or bare commit ids as numbers
        if info.field_name == "version" and isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


# --- glide.yaml ---


class Owner(_GlideModel):
    """Someone to contact about the package."""

    name: Optional[str] = None
    email: Optional[str] = None
    homepage: Optional[str] = None

    def to_yaml_dict(self) -> Dict[str, Any]:
        return _compact(self.model_dump(by_alias=True))


class Dependency(_GlideModel):
    """A package the project depends on."""

    name: str = Field(alias="package")
    version: Optional[str] = None
    repo: Optional[str] = None
    vcs: Optional[str] = None
    subpackages: List[str] = Field(default_factory=list)
    arch: List[str] = Field(default_factory=list)
    os: List[str] = Field(default_factory=list)

    def to_yaml_dict(self) -> Dict[str, Any]:
        return _compact(self.model_dump(by_alias=True))


class Manifest(_GlideModel):
    """The glide.yaml schema."""

    name: str = Field(alias="package")
    description: Optional[str] = None
    homepage: Optional[str] = None
    license: Optional[str] = None
    owners: List[Owner] = Field(default_factory=list)
    ignore: List[str] = Field(default_factory=list)
    exclude_dirs: List[str] = Field(default_factory=list, alias="excludeDirs")
    imports: List[Dependency] = Field(default_factory=list, alias="import")
    dev_imports: List[Dependency] = Field(default_factory=list, alias="testImport")

    def to_yaml_dict(self) -> Dict[str, Any]:
        data = {
            "package": self.name,
            "description": self.description,
            "homepage": self.homepage,
            "license": self.license,
            "owners": [o.to_yaml_dict() for o in self.owners],
            "ignore": list(self.ignore),
            "excludeDirs": list(self.exclude_dirs),
            "import": [d.to_yaml_dict() for d in self.imports],
            "testImport": [d.to_yaml_dict() for d in self.dev_imports],
        }
        return _compact(data, keep=("package", "import"))


# --- glide.lock ---


class LockedDependency(_GlideModel):
    """A single pinned dependency from glide.lock."""

    name: str
    version: str = ""
    repo: Optional[str] = None
    vcs: Optional[str] = None
    subpackages: List[str] = Field(default_factory=list)
    arch: List[str] = Field(default_factory=list)
    os: List[str] = Field(default_factory=list)


class Lockfile(_GlideModel):
    """The glide.lock schema."""

    hash: str = ""
    updated: Optional[datetime] = None
    imports: List[LockedDependency] = Field(default_factory=list)
    dev_imports: List[LockedDependency] = Field(default_factory=list, alias="testImports")
