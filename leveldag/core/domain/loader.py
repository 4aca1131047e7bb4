"""Load item definitions from YAML or JSON files.

File layout::

    name: build
    items:
      - id: fetch
      - id: compile
        depends_on: [fetch]
        data:
          command: make
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from leveldag.core.domain.dag import Item
from leveldag.core.domain.traversal import to_map
from leveldag.core.exceptions import ItemFileError
from leveldag.core.logging import get_logger

logger = get_logger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class ItemDecl(BaseModel):
    """Single item declaration as written in an item file."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: str = Field(min_length=1)
    depends_on: list[str] = Field(default_factory=list, alias="dependencies")
    data: Any = None

    @field_validator("depends_on", mode="before")
    @classmethod
    def _coerce_single_dependency(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def to_item(self) -> Item:
        return Item(id=self.id, dependencies=tuple(self.depends_on), data=self.data)


class ItemFile(BaseModel):
    """Top-level structure of an item file."""

    model_config = ConfigDict(extra="ignore")

    name: str = "unnamed"
    items: list[ItemDecl] = Field(default_factory=list)


def parse_items(data: Any, source: str = "<data>") -> tuple[str, dict[str, Item]]:
    """Validate raw item-file content and build the item map.

    Returns
    -------
    tuple[str, dict[str, Item]]
        The declared name and the items keyed by identifier

    Raises
    ------
    ItemFileError
        If the content does not match the item file layout
    """
    if not isinstance(data, dict):
        raise ItemFileError(f"{source}: expected a mapping with an 'items' list")

    try:
        parsed = ItemFile.model_validate(data)
    except PydanticValidationError as e:
        raise ItemFileError(f"{source}: invalid item file: {e}") from e

    seen: set[str] = set()
    for decl in parsed.items:
        if decl.id in seen:
            logger.warning(
                "Duplicate item id '{item_id}' in {source}, last definition wins",
                item_id=decl.id,
                source=source,
            )
        seen.add(decl.id)

    return parsed.name, to_map(decl.to_item() for decl in parsed.items)


def load_items(path: str | Path) -> tuple[str, dict[str, Item]]:
    """Read an item file (``.yaml``, ``.yml`` or ``.json``).

    Raises
    ------
    ItemFileError
        If the file cannot be read or parsed
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ItemFileError(f"{file_path}: cannot read file: {e}") from e

    try:
        if file_path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ItemFileError(f"{file_path}: parse error: {e}") from e

    name, items = parse_items(data, source=str(file_path))
    logger.debug("Loaded {count} items from {path}", count=len(items), path=file_path)
    return name, items


__all__ = ["ItemDecl", "ItemFile", "load_items", "parse_items"]
