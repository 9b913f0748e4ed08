"""Editable condition-group trees and their fold to and from filter trees.

Editor trees are immutable: every operation returns a new tree and reuses
the untouched subtrees of the old one.
"""

import itertools
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pydantic import ConfigDict, Field

from harborops.core.db import CamelModel
from harborops.core.modules.field.models import FilterFieldMetadata
from harborops.core.modules.filter.comparison import are_filters_equal
from harborops.core.modules.filter.models import (
    ConditionType,
    FieldType,
    Filter,
    FilterCondition,
    FilterGroup,
    FilterOperator,
    has_active_filters,
    is_condition_active,
)
from harborops.core.modules.preset.models import FilterPreset
from harborops.errors import NotFoundError

Groups = tuple["ConditionGroupState", ...]


class FilterRow(CamelModel):
    """One editable condition."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Session-local row id")
    key: str = Field("", description="Selected field key, empty until chosen")
    type: FieldType = Field(FieldType.STRING, description="Type of the selected field")
    operator: FilterOperator = Field(FilterOperator.EQ, description="Selected operator")
    value: Any = Field(None, description="Entered value")
    case_sensitive: bool | None = Field(None, description="Case-sensitive pattern match")
    field_metadata: FilterFieldMetadata | None = Field(None, description="Metadata of the selected field")

    def to_condition(self) -> FilterCondition | None:
        """The row as a filter condition, None while incomplete."""
        if not self.key:
            return None
        condition = FilterCondition(
            key=self.key,
            type=self.type,
            operator=self.operator,
            value=self.value,
            case_sensitive=self.case_sensitive,
        )
        return condition if is_condition_active(condition) else None


class ConditionGroupState(CamelModel):
    """One editable group: its own rows plus nested groups."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Session-local group id")
    condition: ConditionType = Field(ConditionType.AND, description="Combinator for rows and nested groups")
    rows: tuple[FilterRow, ...] = Field((), description="Conditions of this group")
    groups: tuple["ConditionGroupState", ...] = Field((), description="Nested groups")


class IdGenerator:
    """Ids unique within one editing session."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def group_id(self) -> str:
        return f"group-{next(self._counter)}"

    def row_id(self) -> str:
        return f"row-{next(self._counter)}"


def create_row(ids: IdGenerator, field: FilterFieldMetadata | None = None) -> FilterRow:
    if field is None:
        return FilterRow(id=ids.row_id())
    return FilterRow(
        id=ids.row_id(),
        key=field.key,
        type=field.type,
        operator=field.operators[0],
        field_metadata=field,
    )


def create_empty_group(ids: IdGenerator, condition: ConditionType = ConditionType.AND) -> ConditionGroupState:
    """A group holding one blank row, what the panel shows before anything is chosen."""
    return ConditionGroupState(id=ids.group_id(), condition=condition, rows=(create_row(ids),))


def _group_from_filter(group: FilterGroup, fields: Mapping[str, FilterFieldMetadata], ids: IdGenerator) -> ConditionGroupState:
    rows = []
    nested = []
    for child in group.childs:
        if isinstance(child, FilterCondition):
            rows.append(_row_from_condition(child, fields, ids))
        else:
            nested.append(_group_from_filter(child, fields, ids))
    return ConditionGroupState(id=ids.group_id(), condition=group.condition, rows=tuple(rows), groups=tuple(nested))


def _row_from_condition(condition: FilterCondition, fields: Mapping[str, FilterFieldMetadata], ids: IdGenerator) -> FilterRow:
    return FilterRow(
        id=ids.row_id(),
        key=condition.key,
        type=condition.type,
        operator=condition.operator,
        value=condition.value,
        case_sensitive=condition.case_sensitive,
        field_metadata=fields.get(condition.key),
    )


def extract_groups(
    filter: Filter | None, fields: Mapping[str, FilterFieldMetadata], ids: IdGenerator
) -> list[ConditionGroupState]:
    """Unfold a filter tree into editor groups.

    A lone condition becomes a one-row group. Rows of keys missing from
    `fields` are kept without metadata.
    """
    if filter is None:
        return []
    if isinstance(filter, FilterCondition):
        return [ConditionGroupState(id=ids.group_id(), rows=(_row_from_condition(filter, fields, ids),))]
    return [_group_from_filter(filter, fields, ids)]


def build_filter_from_group(group: ConditionGroupState) -> Filter | None:
    """Fold an editor group into a filter tree.

    Rows come before nested groups. A group without any complete condition
    folds to None, an and/or group with a single effective child folds to
    that child. A not group keeps its wrapper so the negation survives.
    """
    childs: list[Filter] = [condition for row in group.rows if (condition := row.to_condition()) is not None]
    childs.extend(built for nested in group.groups if (built := build_filter_from_group(nested)) is not None)
    if not childs:
        return None
    if len(childs) == 1 and group.condition != ConditionType.NOT:
        return childs[0]
    return FilterGroup(condition=group.condition, childs=childs)


def build_filter_from_groups(groups: Sequence[ConditionGroupState]) -> Filter | None:
    """Fold the editor's root groups, several roots are ANDed."""
    filters = [built for group in groups if (built := build_filter_from_group(group)) is not None]
    if not filters:
        return None
    if len(filters) == 1:
        return filters[0]
    return FilterGroup(condition=ConditionType.AND, childs=filters)


def has_group_filters(group: ConditionGroupState) -> bool:
    return any(row.to_condition() is not None for row in group.rows) or any(
        has_group_filters(nested) for nested in group.groups
    )


def _rewrite_group(
    group: ConditionGroupState, group_id: str, transform: Callable[[ConditionGroupState], ConditionGroupState]
) -> ConditionGroupState:
    if group.id == group_id:
        return transform(group)
    nested = tuple(_rewrite_group(child, group_id, transform) for child in group.groups)
    if all(new is old for new, old in zip(nested, group.groups, strict=True)):
        return group
    return group.model_copy(update={"groups": nested})


def _rewrite(
    groups: Sequence[ConditionGroupState],
    group_id: str,
    transform: Callable[[ConditionGroupState], ConditionGroupState],
) -> Groups:
    result = tuple(_rewrite_group(group, group_id, transform) for group in groups)
    if all(new is old for new, old in zip(result, groups, strict=True)):
        raise NotFoundError(f"Condition group '{group_id}' not found")
    return result


def _find_row_group(groups: Iterable[ConditionGroupState], row_id: str) -> ConditionGroupState | None:
    for group in groups:
        if any(row.id == row_id for row in group.rows):
            return group
        found = _find_row_group(group.groups, row_id)
        if found is not None:
            return found
    return None


def _rewrite_row(
    groups: Sequence[ConditionGroupState],
    row_id: str,
    transform: Callable[[tuple[FilterRow, ...]], tuple[FilterRow, ...]],
) -> Groups:
    owner = _find_row_group(groups, row_id)
    if owner is None:
        raise NotFoundError(f"Filter row '{row_id}' not found")
    return _rewrite(groups, owner.id, lambda group: group.model_copy(update={"rows": transform(group.rows)}))


def add_row(
    groups: Sequence[ConditionGroupState], group_id: str, ids: IdGenerator, field: FilterFieldMetadata | None = None
) -> Groups:
    row = create_row(ids, field)
    return _rewrite(groups, group_id, lambda group: group.model_copy(update={"rows": (*group.rows, row)}))


def remove_row(groups: Sequence[ConditionGroupState], row_id: str) -> Groups:
    return _rewrite_row(groups, row_id, lambda rows: tuple(row for row in rows if row.id != row_id))


def update_row(groups: Sequence[ConditionGroupState], row_id: str, **changes: Any) -> Groups:
    """Change members of one row.

    Selecting another field (`field_metadata`) also switches key and type,
    keeps the operator only when the new field allows it and clears the value.

    Raises:
        ValueError: If a change names something that is not a row member
        NotFoundError: If no row has the id
    """
    unknown = set(changes) - (set(FilterRow.model_fields) - {"id"})
    if unknown:
        raise ValueError(f"Unknown filter row members: {sorted(unknown)}")

    def transform(row: FilterRow) -> FilterRow:
        updates = dict(changes)
        field: FilterFieldMetadata | None = updates.get("field_metadata")
        if field is not None and field.key != row.key:
            updates.setdefault("key", field.key)
            updates.setdefault("type", field.type)
            if updates.get("operator", row.operator) not in field.operators:
                updates["operator"] = field.operators[0]
            updates.setdefault("value", None)
        return row.model_copy(update=updates)

    return _rewrite_row(groups, row_id, lambda rows: tuple(transform(row) if row.id == row_id else row for row in rows))


def add_nested_group(
    groups: Sequence[ConditionGroupState],
    parent_id: str,
    ids: IdGenerator,
    condition: ConditionType = ConditionType.AND,
) -> Groups:
    nested = create_empty_group(ids, condition)
    return _rewrite(groups, parent_id, lambda group: group.model_copy(update={"groups": (*group.groups, nested)}))


def remove_nested_group(groups: Sequence[ConditionGroupState], group_id: str) -> Groups:
    """Remove a group, nested or root, with everything below it."""
    if any(group.id == group_id for group in groups):
        return tuple(group for group in groups if group.id != group_id)

    def drop(group: ConditionGroupState) -> ConditionGroupState:
        return group.model_copy(update={"groups": tuple(child for child in group.groups if child.id != group_id)})

    for group in groups:
        parent = _find_parent(group, group_id)
        if parent is not None:
            return _rewrite(groups, parent.id, drop)
    raise NotFoundError(f"Condition group '{group_id}' not found")


def _find_parent(group: ConditionGroupState, group_id: str) -> ConditionGroupState | None:
    for child in group.groups:
        if child.id == group_id:
            return group
        found = _find_parent(child, group_id)
        if found is not None:
            return found
    return None


def change_condition(groups: Sequence[ConditionGroupState], group_id: str, condition: ConditionType) -> Groups:
    return _rewrite(groups, group_id, lambda group: group.model_copy(update={"condition": condition}))


class FilterEditor:
    """One filter-panel editing session, optionally tied to a loaded preset."""

    def __init__(self, fields: Iterable[FilterFieldMetadata], ids: IdGenerator | None = None) -> None:
        self._fields = {field.key: field for field in fields}
        self._ids = ids or IdGenerator()
        self.groups: Groups = (create_empty_group(self._ids),)
        self.loaded_preset: FilterPreset | None = None

    @property
    def current_filter(self) -> Filter | None:
        """The canonical filter the editor currently describes."""
        return build_filter_from_groups(self.groups)

    @property
    def has_modifications(self) -> bool:
        """Whether the edited filter drifted from the loaded preset."""
        if self.loaded_preset is None:
            return False
        current = self.current_filter
        if current is None:
            return False
        return not are_filters_equal(current, self.loaded_preset.filters)

    @property
    def can_save_preset(self) -> bool:
        return has_active_filters(self.current_filter)

    def reset(self) -> None:
        """Drop all edits and the loaded preset."""
        self.groups = (create_empty_group(self._ids),)
        self.loaded_preset = None

    def load_filter(self, filter: Filter | None) -> None:
        groups = extract_groups(filter, self._fields, self._ids)
        self.groups = tuple(groups) or (create_empty_group(self._ids),)

    def load_preset(self, preset: FilterPreset | None) -> None:
        """Start editing a preset's filter.

        Raises:
            NotFoundError: If the preset is gone, the editor is reset first
        """
        if preset is None:
            self.reset()
            raise NotFoundError("Filter preset no longer exists")
        self.loaded_preset = preset
        self.load_filter(preset.filters)

    def copy_name(self) -> str:
        """Name for saving the loaded preset as a new one."""
        if self.loaded_preset is None:
            raise NotFoundError("No filter preset loaded")
        return f"{self.loaded_preset.name} (Copy)"

    def apply(self) -> Filter | None:
        return self.current_filter

    def add_row(self, group_id: str, key: str | None = None) -> FilterRow:
        field = self._fields.get(key) if key else None
        self.groups = add_row(self.groups, group_id, self._ids, field)
        owner = self._get_group(group_id)
        return owner.rows[-1]

    def remove_row(self, row_id: str) -> None:
        self.groups = remove_row(self.groups, row_id)

    def update_row(self, row_id: str, **changes: Any) -> None:
        key = changes.pop("key", None)
        if key is not None and "field_metadata" not in changes and key in self._fields:
            changes["field_metadata"] = self._fields[key]
        elif key is not None:
            changes["key"] = key
        self.groups = update_row(self.groups, row_id, **changes)

    def add_nested_group(self, parent_id: str, condition: ConditionType = ConditionType.AND) -> ConditionGroupState:
        self.groups = add_nested_group(self.groups, parent_id, self._ids, condition)
        return self._get_group(parent_id).groups[-1]

    def remove_nested_group(self, group_id: str) -> None:
        self.groups = remove_nested_group(self.groups, group_id)

    def change_condition(self, group_id: str, condition: ConditionType) -> None:
        self.groups = change_condition(self.groups, group_id, condition)

    def _get_group(self, group_id: str) -> ConditionGroupState:
        stack = list(self.groups)
        while stack:
            group = stack.pop()
            if group.id == group_id:
                return group
            stack.extend(group.groups)
        raise NotFoundError(f"Condition group '{group_id}' not found")
