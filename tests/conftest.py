"""Shared fixtures for the schema graph engine tests."""

import pytest

from schemagraph.core.config import Settings


def make_table(name, *columns):
    """Build a table dict from (name, type, flags) tuples."""
    result = []
    for column in columns:
        col_name, col_type = column[0], column[1]
        flags = column[2] if len(column) > 2 else {}
        result.append({"name": col_name, "type": col_type, **flags})
    return {"name": name, "columns": result}


PK = {"isPrimary": True}
FK = {"isForeign": True}


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def users_posts():
    return {
        "tables": [
            make_table("users", ("id", "INT", PK), ("name", "VARCHAR")),
            make_table("posts", ("id", "INT", PK), ("user_id", "INT", FK)),
        ],
        "relationships": [
            {
                "fromTable": "posts",
                "toTable": "users",
                "fromColumn": "user_id",
                "toColumn": "id",
                "fromCardinality": "1",
                "toCardinality": "many",
            }
        ],
    }


@pytest.fixture
def isolated_three():
    return {
        "tables": [
            make_table("alpha", ("id", "INT", PK)),
            make_table("beta", ("id", "INT", PK)),
            make_table("gamma", ("id", "INT", PK)),
        ],
        "relationships": [],
    }


@pytest.fixture
def blog_schema():
    """users <- posts <- comments, posts <-> tags via post_tags, plus an isolated settings table."""
    return {
        "tables": [
            make_table("users", ("id", "INT", PK), ("email", "VARCHAR", {"unique": True}),
                       ("created_at", "TIMESTAMP")),
            make_table("posts", ("id", "INT", PK), ("user_id", "INT", FK), ("title", "VARCHAR")),
            make_table("comments", ("id", "INT", PK), ("post_id", "INT", FK), ("user_id", "INT", FK),
                       ("body", "TEXT"), ("rating", "INT")),
            make_table("tags", ("id", "INT", PK), ("label", "VARCHAR")),
            make_table("post_tags", ("post_id", "INT", FK), ("tag_id", "INT", FK)),
            make_table("settings", ("key", "VARCHAR", PK), ("value", "TEXT")),
        ],
        "relationships": [
            {"fromTable": "posts", "toTable": "users", "fromColumn": "user_id", "toColumn": "id",
             "fromCardinality": "many", "toCardinality": "1"},
            {"fromTable": "comments", "toTable": "posts", "fromColumn": "post_id", "toColumn": "id",
             "fromCardinality": "many", "toCardinality": "1"},
            {"fromTable": "comments", "toTable": "users", "fromColumn": "user_id", "toColumn": "id",
             "fromCardinality": "many", "toCardinality": "1"},
            {"fromTable": "post_tags", "toTable": "posts", "fromColumn": "post_id", "toColumn": "id",
             "fromCardinality": "many", "toCardinality": "1"},
            {"fromTable": "post_tags", "toTable": "tags", "fromColumn": "tag_id", "toColumn": "id",
             "fromCardinality": "many", "toCardinality": "1"},
        ],
    }


def chain_schema(names):
    """Tables linked in a chain a -> b -> c ..."""
    return {
        "tables": [make_table(n, ("id", "INT", PK)) for n in names],
        "relationships": [
            {"fromTable": a, "toTable": b, "fromCardinality": "many", "toCardinality": "1"}
            for a, b in zip(names, names[1:])
        ],
    }
