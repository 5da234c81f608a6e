"""Alembic revision tests — the revision chain rebuilds the ORM schema.

Revisions are read with ``ast`` so no database or Alembic runtime is
needed: every mapped table and column must be created by some revision,
enum types must list the same values as the models, and the revisions
must form a single linear chain.
"""

from __future__ import annotations

import ast
from pathlib import Path

import sqlalchemy as sa

import hrms.common.audit  # noqa: F401  registers audit_trail
import tests.conftest  # noqa: F401  registers every domain's models
from hrms.database import Base

VERSIONS = Path(__file__).resolve().parent.parent / "alembic" / "versions"

# Column helpers in the initial revision whose first argument is the column name.
NAMED_HELPERS = {"Column", "_money", "_days", "_employee_fk"}


def _revisions() -> dict[str, ast.Module]:
    return {
        path.name: ast.parse(path.read_text())
        for path in sorted(VERSIONS.glob("*.py"))
    }


def _assignment(tree: ast.Module, name: str):
    for node in tree.body:
        target = node.targets[0] if isinstance(node, ast.Assign) else getattr(node, "target", None)
        if isinstance(target, ast.Name) and target.id == name and node.value is not None:
            return ast.literal_eval(node.value)
    raise AssertionError(f"{name} not assigned")


def _call_name(node: ast.expr) -> str | None:
    if not isinstance(node, ast.Call):
        return None
    func = node.func
    return func.attr if isinstance(func, ast.Attribute) else getattr(func, "id", None)


def _column_names(args: list[ast.expr]) -> set[str]:
    names = set()
    for arg in args:
        if isinstance(arg, ast.Starred) and _call_name(arg.value) == "_timestamps":
            names |= {"created_at", "updated_at"}
        elif _call_name(arg) == "_id":
            names.add("id")
        elif _call_name(arg) in NAMED_HELPERS:
            names.add(ast.literal_eval(arg.args[0]))
    return names


def _migrated_schema() -> dict[str, set[str]]:
    tables: dict[str, set[str]] = {}
    for tree in _revisions().values():
        for node in ast.walk(tree):
            if _call_name(node) == "create_table":
                tables[ast.literal_eval(node.args[0])] = _column_names(node.args[1:])
            elif _call_name(node) == "add_column":
                table = ast.literal_eval(node.args[0])
                tables.setdefault(table, set())
        for node in tree.body:
            if isinstance(node, ast.Assign) and getattr(node.targets[0], "id", None) == "PROFILE_COLUMNS":
                tables["employees"] |= _column_names(node.value.elts)
    return tables


def test_revisions_create_every_mapped_table():
    assert set(_migrated_schema()) == set(Base.metadata.tables)


def test_revisions_create_every_mapped_column():
    migrated = _migrated_schema()
    for name, table in Base.metadata.tables.items():
        assert migrated[name] == {c.name for c in table.columns}, name


def test_enum_types_match_models():
    enum_types = _assignment(_revisions()["001_initial_schema.py"], "ENUM_TYPES")
    for table in Base.metadata.tables.values():
        for column in table.columns:
            if isinstance(column.type, sa.Enum):
                assert enum_types[column.type.name] == list(column.type.enums), column


def test_revisions_form_a_single_chain():
    parents = {
        _assignment(tree, "revision"): _assignment(tree, "down_revision")
        for tree in _revisions().values()
    }
    assert parents == {
        "001_initial_schema": None,
        "002_add_employee_profile_columns": "001_initial_schema",
        "003_add_birthday_wishes": "002_add_employee_profile_columns",
    }


def test_initial_downgrade_drops_what_upgrade_creates():
    tree = _revisions()["001_initial_schema.py"]
    created = [
        ast.literal_eval(node.args[0])
        for node in ast.walk(tree)
        if _call_name(node) == "create_table"
    ]
    assert _assignment(tree, "CREATION_ORDER") == created
