"""
Query building for datagrid filters.

``IQueryBuilder`` is the capability set a filter is allowed to use: append a
``WHERE`` condition and bind a named parameter.  ``SelectQueryBuilder``
implements it on top of a SQLAlchemy ``Select`` over a declarative model,
with the model aliased as the root alias (``"o"`` by convention).

Conditions are either raw SQL fragments (wrapped in ``sqlalchemy.text``)
referring to aliases, or SQLAlchemy boolean expressions built from
``SelectQueryBuilder.entity(alias)``.  Parameters are kept on the builder
and passed at execution time.

``ProxyQuery`` wraps a builder for the lifetime of one datagrid request and
adds sorting, paging, association joins and unique parameter ids.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import ColumnElement, Select, and_, asc, desc, or_, select, text
from sqlalchemy.orm import RelationshipProperty, aliased

from .exceptions import QueryBuilderError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

logger = logging.getLogger("admin_datagrid.query")

ROOT_ALIAS = "o"
JOIN_ALIAS_PREFIX = "s"


@runtime_checkable
class IQueryBuilder(Protocol):
    """Mutable query builder consumed by filters."""

    def and_where(self, condition: Any) -> IQueryBuilder: ...

    def or_where(self, condition: Any) -> IQueryBuilder: ...

    def set_parameter(self, name: str, value: Any) -> IQueryBuilder: ...

    def get_parameter(self, name: str) -> Any: ...

    def get_parameters(self) -> dict[str, Any]: ...

    def get_root_alias(self) -> str: ...

    def get_where_parts(self) -> list[Any]: ...

    def entity(self, alias: str) -> Any: ...

    def left_join(
        self, parent_alias: str, relationship: str, alias: str
    ) -> IQueryBuilder: ...

    def get_statement(self) -> Select[Any]: ...


def _as_clause(condition: Any) -> ColumnElement[bool]:
    if isinstance(condition, str):
        return text(condition)  # type: ignore[return-value]
    return condition  # type: ignore[no-any-return]


class SelectQueryBuilder:
    """
    ``IQueryBuilder`` over a SQLAlchemy ``Select``.

    Args:
        model: Declarative model queried as the root entity.
        root_alias: SQL alias of the root entity.

    Usage::

        qb = SelectQueryBuilder(Book)
        qb.and_where("o.title = :title").set_parameter("title", "Dune")
        qb.and_where(qb.entity("o").year > 1960)
    """

    def __init__(self, model: type[Any], *, root_alias: str = ROOT_ALIAS) -> None:
        self._model = model
        self._root_alias = root_alias
        self._entities: dict[str, Any] = {root_alias: aliased(model, name=root_alias)}
        self._joins: list[tuple[Any, Any]] = []
        self._where: ColumnElement[bool] | None = None
        self._where_parts: list[ColumnElement[bool]] = []
        self._parameters: dict[str, Any] = {}

    @property
    def model(self) -> type[Any]:
        return self._model

    def get_root_alias(self) -> str:
        return self._root_alias

    def get_root_entity(self) -> Any:
        return self._entities[self._root_alias]

    def has_alias(self, alias: str) -> bool:
        return alias in self._entities

    def entity(self, alias: str) -> Any:
        """
        Return the aliased entity registered under ``alias``.

        Raises:
            QueryBuilderError: If the alias is unknown.
        """
        try:
            return self._entities[alias]
        except KeyError:
            raise QueryBuilderError(f"Unknown alias {alias!r}") from None

    # -- conditions ---------------------------------------------------------

    def and_where(self, condition: Any) -> SelectQueryBuilder:
        clause = _as_clause(condition)
        self._where_parts.append(clause)
        self._where = clause if self._where is None else and_(self._where, clause)
        return self

    def or_where(self, condition: Any) -> SelectQueryBuilder:
        clause = _as_clause(condition)
        self._where_parts.append(clause)
        self._where = clause if self._where is None else or_(self._where, clause)
        return self

    def get_where_parts(self) -> list[ColumnElement[bool]]:
        return list(self._where_parts)

    def get_where(self) -> ColumnElement[bool] | None:
        return self._where

    # -- parameters ---------------------------------------------------------

    def set_parameter(self, name: str, value: Any) -> SelectQueryBuilder:
        self._parameters[name] = value
        return self

    def get_parameter(self, name: str) -> Any:
        return self._parameters.get(name)

    def get_parameters(self) -> dict[str, Any]:
        return dict(self._parameters)

    # -- joins --------------------------------------------------------------

    def left_join(
        self, parent_alias: str, relationship: str, alias: str
    ) -> SelectQueryBuilder:
        """
        LEFT OUTER JOIN ``parent_alias.relationship`` as ``alias``.

        Raises:
            QueryBuilderError: If the alias is taken or ``relationship`` is
                not a relationship of the parent entity.
        """
        if alias in self._entities:
            raise QueryBuilderError(f"Alias {alias!r} is already in use")
        parent = self.entity(parent_alias)
        attribute = getattr(parent, relationship, None)
        prop = getattr(attribute, "property", None)
        if not isinstance(prop, RelationshipProperty):
            raise QueryBuilderError(
                f"{parent_alias}.{relationship} is not a relationship"
            )
        target = aliased(prop.mapper.class_, name=alias)
        self._entities[alias] = target
        self._joins.append((target, attribute))
        return self

    def get_statement(self) -> Select[Any]:
        stmt = select(self.get_root_entity())
        for target, onclause in self._joins:
            stmt = stmt.outerjoin(target, onclause)
        if self._where is not None:
            stmt = stmt.where(self._where)
        return stmt


def _mapping_field_name(mapping: Any) -> str:
    if isinstance(mapping, str):
        return mapping
    if isinstance(mapping, dict) and "field_name" in mapping:
        return str(mapping["field_name"])
    raise QueryBuilderError(f"Invalid association mapping: {mapping!r}")


class ProxyQuery:
    """Per-request wrapper around an ``IQueryBuilder``."""

    def __init__(self, query_builder: IQueryBuilder) -> None:
        self._query_builder = query_builder
        self._sort_by: str | None = None
        self._sort_order = "ASC"
        self._first_result: int | None = None
        self._max_results: int | None = None
        self._parameter_id = 0
        self._entity_join_aliases: list[str] = []

    def get_query_builder(self) -> IQueryBuilder:
        return self._query_builder

    # -- sorting / paging ---------------------------------------------------

    def set_sort_by(self, sort_by: str | None) -> ProxyQuery:
        self._sort_by = sort_by
        return self

    def get_sort_by(self) -> str | None:
        return self._sort_by

    def set_sort_order(self, sort_order: str) -> ProxyQuery:
        order = sort_order.upper()
        if order not in ("ASC", "DESC"):
            raise ValueError(f"Sort order must be ASC or DESC, got {sort_order!r}")
        self._sort_order = order
        return self

    def get_sort_order(self) -> str:
        return self._sort_order

    def set_first_result(self, first_result: int | None) -> ProxyQuery:
        self._first_result = first_result
        return self

    def get_first_result(self) -> int | None:
        return self._first_result

    def set_max_results(self, max_results: int | None) -> ProxyQuery:
        self._max_results = max_results
        return self

    def get_max_results(self) -> int | None:
        return self._max_results

    # -- filter helpers -----------------------------------------------------

    def get_unique_parameter_id(self) -> int:
        parameter_id = self._parameter_id
        self._parameter_id += 1
        return parameter_id

    def entity_join(self, association_mappings: Sequence[Any]) -> str:
        """
        Left-join a chain of associations from the root entity.

        Each step is aliased ``s_<field>`` appended to the previous alias
        (``s_author``, ``s_author_publisher``) and is joined at most once
        per query.

        Returns:
            Alias of the last joined entity, or the root alias when
            ``association_mappings`` is empty.
        """
        alias = self._query_builder.get_root_alias()
        new_alias = JOIN_ALIAS_PREFIX
        for mapping in association_mappings:
            new_alias += f"_{_mapping_field_name(mapping)}"
            if new_alias not in self._entity_join_aliases:
                self._query_builder.left_join(
                    alias, _mapping_field_name(mapping), new_alias
                )
                self._entity_join_aliases.append(new_alias)
            alias = new_alias
        return alias

    def get_entity_join_aliases(self) -> list[str]:
        return list(self._entity_join_aliases)

    # -- execution ----------------------------------------------------------

    def _sort_column(self, sort_by: str) -> Any:
        alias, _, field = sort_by.rpartition(".")
        entity = self._query_builder.entity(alias or self._query_builder.get_root_alias())
        column = getattr(entity, field, None)
        if column is None:
            raise QueryBuilderError(f"Cannot sort by unknown field {sort_by!r}")
        return column

    def get_statement(self) -> Select[Any]:
        """Builder statement with ordering, limit and offset applied."""
        stmt = self._query_builder.get_statement()
        if self._sort_by:
            column = self._sort_column(self._sort_by)
            stmt = stmt.order_by(
                desc(column) if self._sort_order == "DESC" else asc(column)
            )
        if self._max_results is not None:
            stmt = stmt.limit(self._max_results)
        if self._first_result is not None:
            stmt = stmt.offset(self._first_result)
        return stmt

    def execute(self, session: Session) -> list[Any]:
        """Run the query on ``session`` and return the root entities."""
        stmt = self.get_statement()
        parameters = self._query_builder.get_parameters()
        logger.debug("Executing datagrid query with parameters %s", sorted(parameters))
        result = session.execute(stmt, parameters or None)
        return list(result.scalars().all())
