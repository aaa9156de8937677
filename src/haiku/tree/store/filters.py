from dataclasses import dataclass


def _quote(value: str) -> str:
    """Quote a string literal for a LanceDB where clause."""
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


@dataclass(frozen=True)
class FieldEquals:
    """Field equals value. A ``None`` value matches missing (null) fields."""

    field: str
    value: str | None

    @property
    def matches_nothing(self) -> bool:
        return False

    def to_sql(self) -> str:
        if self.value is None:
            return f"{self.field} IS NULL"
        return f"{self.field} = {_quote(self.value)}"


@dataclass(frozen=True)
class FieldIn:
    """Field value is a member of the given set."""

    field: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    @property
    def matches_nothing(self) -> bool:
        return not self.values

    def to_sql(self) -> str:
        members = ", ".join(_quote(value) for value in self.values)
        return f"{self.field} IN ({members})"


@dataclass(frozen=True)
class ArrayContains:
    """Given value is a member of an array field."""

    field: str
    value: str

    @property
    def matches_nothing(self) -> bool:
        return False

    def to_sql(self) -> str:
        return f"array_has_any({self.field}, [{_quote(self.value)}])"


Predicate = FieldEquals | FieldIn | ArrayContains


def combine_filters(*predicates: Predicate) -> str | None:
    """Combine predicates into a single where clause with AND logic.

    Returns None if no predicates are given.
    """
    clauses = [predicate.to_sql() for predicate in predicates]
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return " AND ".join(f"({clause})" for clause in clauses)
