"""Unit tests for the command builders (all dialects)."""

from __future__ import annotations

import pytest

from dbcommand.build.base import ENUMERATED_SELECT_REQUIRED, CommandBuilder, RuntimeContext
from dbcommand.build.mysql import MySQLCommandBuilder
from dbcommand.build.params import ParameterSet
from dbcommand.build.postgres import PostgresCommandBuilder
from dbcommand.build.quoter import Quoter
from dbcommand.build.registry import BuilderFactory
from dbcommand.build.sqlite import SQLiteCommandBuilder
from dbcommand.errors import ConfigurationError, InvalidArgumentError, NotSupportedError
from dbcommand.schema.dialect import SQLITE
from dbcommand.schema.values import RawSql, SelectQuery

T_UPSERT_ROW = {
    "email": "test@example.com",
    "recovery_email": "recovery@example.com",
    "address": "Earth",
    "status": 1,
}


# ---------------------------------------------------------------------------
# Generated parameter names
# ---------------------------------------------------------------------------


def test_runtime_context_names_are_sequential():
    ctx = RuntimeContext()
    assert [ctx.add_value(v) for v in ("a", "b", "c")] == ["qp0", "qp1", "qp2"]


def test_runtime_context_skips_taken_names():
    ctx = RuntimeContext(ParameterSet({"qp1": "taken"}))
    assert ctx.add_value("x") == "qp2"
    assert ctx.params.as_dict() == {"qp1": "taken", "qp2": "x"}


# ---------------------------------------------------------------------------
# Batch insert
# ---------------------------------------------------------------------------


def test_batch_insert_sqlite(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert(
        "customer",
        ["name", "email"],
        [["a", "a@x.com"], ["b", "b@x.com"]],
    )
    assert r.sql == "INSERT INTO `customer` (`name`, `email`) VALUES (:qp0, :qp1), (:qp2, :qp3)"
    assert r.params.as_dict() == {"qp0": "a", "qp1": "a@x.com", "qp2": "b", "qp3": "b@x.com"}


def test_batch_insert_postgres(pg_builder: PostgresCommandBuilder):
    r = pg_builder.batch_insert("public.customer", ["email"], [["a@x.com"], ["b@x.com"]])
    assert r.sql == 'INSERT INTO "public"."customer" ("email") VALUES (:qp0), (:qp1)'


def test_batch_insert_arity_mismatch(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError) as exc_info:
        sq_builder.batch_insert("customer", ["name", "email"], [["a@x.com"], ["b@x.com"]])
    assert exc_info.value.details == {"row": 0, "expected": 2, "actual": 1}


def test_batch_insert_no_rows_is_empty(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert("customer", ["name", "email"], [])
    assert r.sql == ""
    assert len(r.params) == 0


def test_batch_insert_without_columns(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert("log_entry", [], [["info", "started"]])
    assert r.sql == "INSERT INTO `log_entry` VALUES (:qp0, :qp1)"


def test_batch_insert_raw_cells_are_inlined(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert(
        "customer",
        ["email", "status"],
        [["a@x.com", RawSql("[[status]] + 1")], ["b@x.com", 2]],
    )
    assert r.sql == (
        "INSERT INTO `customer` (`email`, `status`) VALUES (:qp0, `status` + 1), (:qp1, :qp2)"
    )
    # N*M cells minus the raw one
    assert len(r.params) == 2 * 2 - 1


def test_batch_insert_binds_shorthand_looking_values(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert("customer", ["address"], [["{{city}}"], ["[[street]]"]])
    assert r.sql == "INSERT INTO `customer` (`address`) VALUES (:qp0), (:qp1)"
    assert r.params.as_dict() == {"qp0": "{{city}}", "qp1": "[[street]]"}


def test_batch_insert_raw_cell_with_params_not_supported(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(NotSupportedError) as exc_info:
        sq_builder.batch_insert("customer", ["status"], [[RawSql(":s + 1", {"s": 1})]])
    assert exc_info.value.feature == "batch_insert_raw_params"


def test_batch_insert_continues_existing_params(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.batch_insert(
        "customer", ["email"], [["a@x.com"]], params=ParameterSet({"qp0": "keep"})
    )
    assert r.sql == "INSERT INTO `customer` (`email`) VALUES (:qp1)"
    assert r.params.as_dict() == {"qp0": "keep", "qp1": "a@x.com"}


def test_batch_insert_rejects_non_scalars(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError):
        sq_builder.batch_insert("customer", ["email"], [[["nested"]]])


# ---------------------------------------------------------------------------
# Insert and insert-from-select
# ---------------------------------------------------------------------------


def test_insert_mapping(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.insert("customer", {"email": "a@x.com", "name": "A"})
    assert r.sql == "INSERT INTO `customer` (`email`, `name`) VALUES (:qp0, :qp1)"
    assert r.params.as_dict() == {"qp0": "a@x.com", "qp1": "A"}


def test_insert_empty_mapping_uses_default_values(sq_builder: SQLiteCommandBuilder):
    assert sq_builder.insert("customer", {}).sql == "INSERT INTO `customer` DEFAULT VALUES"


def test_insert_subquery_value(sq_builder: SQLiteCommandBuilder):
    sub = SelectQuery(
        sql="SELECT MAX([[status]]) FROM {{customer}} WHERE [[name]] = :name",
        params={"name": "A"},
        columns=["status"],
    )
    r = sq_builder.insert("customer", {"email": "a@x.com", "status": sub})
    assert r.sql == (
        "INSERT INTO `customer` (`email`, `status`) VALUES "
        "(:qp0, (SELECT MAX(`status`) FROM `customer` WHERE `name` = :name))"
    )
    assert r.params.as_dict() == {"qp0": "a@x.com", "name": "A"}


def test_insert_from_select(sq_builder: SQLiteCommandBuilder):
    query = SelectQuery(
        sql="SELECT [[c.email]], [[c.name]] AS [[nick]] FROM {{customer}} c WHERE [[c.id]] = :id",
        params={"id": 1},
        columns=["c.email", "c.name AS nick"],
    )
    r = sq_builder.insert("customer", query)
    assert r.sql == (
        "INSERT INTO `customer` (`email`, `nick`) "
        "SELECT `c`.`email`, `c`.`name` AS `nick` FROM `customer` c WHERE `c`.`id` = :id"
    )
    assert r.params.as_dict() == {"id": 1}



def test_insert_from_select_accepts_empty_param_list(sq_builder: SQLiteCommandBuilder):
    query = SelectQuery(sql="SELECT name FROM src", params=[], columns=["name"])
    r = sq_builder.insert("customer", query)
    assert r.sql == "INSERT INTO `customer` (`name`) SELECT name FROM src"
    assert len(r.params) == 0


def test_subquery_params_cannot_override_generated_names(sq_builder: SQLiteCommandBuilder):
    sub = SelectQuery(sql="SELECT :qp0", params={"qp0": 10}, columns=["x"])
    with pytest.raises(InvalidArgumentError) as exc_info:
        sq_builder.insert("customer", {"status": 1, "name": sub})
    assert exc_info.value.details == {"name": "qp0"}


def test_raw_cell_params_cannot_override_generated_names(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError):
        sq_builder.upsert("customer", {"id": 1, "status": 2}, {"status": RawSql(":qp1 + 1", {"qp1": 7})})


def test_nested_params_may_repeat_an_equal_value(sq_builder: SQLiteCommandBuilder):
    sub = SelectQuery(sql="SELECT :qp0", params={"qp0": "a@x.com"}, columns=["x"])
    r = sq_builder.insert("customer", {"email": "a@x.com", "name": sub})
    assert r.params.as_dict() == {"qp0": "a@x.com"}

@pytest.mark.parametrize(
    "query",
    [
        SelectQuery(sql="SELECT email FROM customer WHERE id = ?", params=[1], columns=["email"]),
        SelectQuery(sql="SELECT * FROM customer", columns=["*"]),
        SelectQuery(sql="SELECT c.* FROM customer c", columns=["c.*"]),
        SelectQuery(sql="SELECT email FROM customer"),
    ],
)
def test_insert_from_select_rejects_unenumerated(sq_builder: SQLiteCommandBuilder, query):
    with pytest.raises(InvalidArgumentError) as exc_info:
        sq_builder.insert("customer", query)
    assert str(exc_info.value) == ENUMERATED_SELECT_REQUIRED
    assert ENUMERATED_SELECT_REQUIRED == "Expected select query object with enumerated (named) parameters"


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


def test_upsert_sqlite_updates_non_key_columns(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.upsert("T_upsert", T_UPSERT_ROW)
    assert r.sql == (
        "INSERT INTO `T_upsert` (`email`, `recovery_email`, `address`, `status`) "
        "VALUES (:qp0, :qp1, :qp2, :qp3) "
        "ON CONFLICT (`email`, `recovery_email`) "
        "DO UPDATE SET `address` = excluded.`address`, `status` = excluded.`status`"
    )
    assert len(r.params) == 4


def test_upsert_postgres(pg_builder: PostgresCommandBuilder):
    r = pg_builder.upsert("T_upsert", T_UPSERT_ROW)
    assert r.sql == (
        'INSERT INTO "T_upsert" ("email", "recovery_email", "address", "status") '
        "VALUES (:qp0, :qp1, :qp2, :qp3) "
        'ON CONFLICT ("email", "recovery_email") '
        'DO UPDATE SET "address" = EXCLUDED."address", "status" = EXCLUDED."status"'
    )


def test_upsert_mysql(my_builder: MySQLCommandBuilder):
    r = my_builder.upsert("T_upsert", T_UPSERT_ROW)
    assert r.sql == (
        "INSERT INTO `T_upsert` (`email`, `recovery_email`, `address`, `status`) "
        "VALUES (:qp0, :qp1, :qp2, :qp3) "
        "ON DUPLICATE KEY UPDATE `address` = VALUES(`address`), `status` = VALUES(`status`)"
    )


def test_upsert_do_nothing_per_dialect(
    sq_builder: SQLiteCommandBuilder,
    pg_builder: PostgresCommandBuilder,
    my_builder: MySQLCommandBuilder,
):
    insert = "INSERT INTO {t} ({e}, {r}, {a}, {s}) VALUES (:qp0, :qp1, :qp2, :qp3)"
    sq = insert.format(t="`T_upsert`", e="`email`", r="`recovery_email`", a="`address`", s="`status`")
    pg = insert.format(t='"T_upsert"', e='"email"', r='"recovery_email"', a='"address"', s='"status"')

    assert sq_builder.upsert("T_upsert", T_UPSERT_ROW, False).sql == f"{sq} ON CONFLICT DO NOTHING"
    assert pg_builder.upsert("T_upsert", T_UPSERT_ROW, False).sql == (
        f'{pg} ON CONFLICT ("email", "recovery_email") DO NOTHING'
    )
    assert my_builder.upsert("T_upsert", T_UPSERT_ROW, False).sql == (
        f"{sq} ON DUPLICATE KEY UPDATE `email` = `T_upsert`.`email`"
    )


def test_upsert_update_column_subset(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.upsert("T_upsert", T_UPSERT_ROW, ["address"])
    assert r.sql.endswith("DO UPDATE SET `address` = excluded.`address`")


def test_upsert_update_column_must_be_inserted(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError) as exc_info:
        sq_builder.upsert("T_upsert", T_UPSERT_ROW, ["orders"])
    assert exc_info.value.details == {"columns": ["orders"]}


def test_upsert_update_mapping_binds_values(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.upsert(
        "T_upsert",
        T_UPSERT_ROW,
        {"orders": RawSql("[[T_upsert.orders]] + 1"), "status": 5},
    )
    assert r.sql.endswith(
        "DO UPDATE SET `orders` = `T_upsert`.`orders` + 1, `status` = :qp4"
    )
    assert r.params["qp4"] == 5


def test_upsert_composite_primary_key_only_does_nothing(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.upsert("order_item", {"order_id": 1, "item_id": 2})
    assert r.sql == (
        "INSERT INTO `order_item` (`order_id`, `item_id`) VALUES (:qp0, :qp1) "
        "ON CONFLICT DO NOTHING"
    )


def test_upsert_primary_key_preferred(pg_builder: PostgresCommandBuilder):
    r = pg_builder.upsert("order_item", {"order_id": 1, "item_id": 2, "quantity": 3})
    assert r.sql.endswith(
        'ON CONFLICT ("order_id", "item_id") DO UPDATE SET "quantity" = EXCLUDED."quantity"'
    )


def test_upsert_table_without_constraint_is_plain_insert(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.upsert("log_entry", {"level": "info", "message": "hi"})
    assert r.sql == "INSERT INTO `log_entry` (`level`, `message`) VALUES (:qp0, :qp1)"


def test_upsert_accepts_shorthand_and_quoted_table(sq_builder: SQLiteCommandBuilder):
    expected = sq_builder.upsert("customer", {"id": 1, "email": "a@x.com"}).sql
    assert sq_builder.upsert("{{customer}}", {"id": 1, "email": "a@x.com"}).sql == expected
    assert sq_builder.upsert("`customer`", {"id": 1, "email": "a@x.com"}).sql == expected


def test_upsert_unknown_table(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError) as exc_info:
        sq_builder.upsert("missing", {"a": 1})
    assert exc_info.value.details == {"table": "missing"}


def test_upsert_without_schema_provider():
    builder = SQLiteCommandBuilder(Quoter(SQLITE))
    with pytest.raises(InvalidArgumentError):
        builder.upsert("customer", {"id": 1})


def test_upsert_empty_insert_data(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError):
        sq_builder.upsert("customer", {})


def test_upsert_from_select_sqlite_wraps_source(sq_builder: SQLiteCommandBuilder):
    query = SelectQuery(
        sql="SELECT [[email]], [[address]] FROM {{customer}} WHERE [[status]] = :status",
        params={"status": 1},
        columns=["email", "address"],
    )
    r = sq_builder.upsert("T_upsert", query)
    assert r.sql == (
        "INSERT INTO `T_upsert` (`email`, `address`) "
        "SELECT * FROM (SELECT `email`, `address` FROM `customer` WHERE `status` = :status) WHERE true "
        "ON CONFLICT (`email`, `recovery_email`) DO UPDATE SET `address` = excluded.`address`"
    )
    assert r.params.as_dict() == {"status": 1}


def test_upsert_from_select_postgres_is_not_wrapped(pg_builder: PostgresCommandBuilder):
    query = SelectQuery(sql="SELECT email, address FROM customer", columns=["email", "address"])
    r = pg_builder.upsert("T_upsert", query)
    assert r.sql.startswith(
        'INSERT INTO "T_upsert" ("email", "address") SELECT email, address FROM customer ON CONFLICT'
    )


# ---------------------------------------------------------------------------
# Raw passthrough
# ---------------------------------------------------------------------------


def test_raw_expands_shorthand_and_keeps_params(sq_builder: SQLiteCommandBuilder):
    r = sq_builder.raw("SELECT * FROM {{customer}} WHERE [[id]] = :id", {":id": 1})
    assert r.sql == "SELECT * FROM `customer` WHERE `id` = :id"
    assert r.params.as_dict() == {"id": 1}


def test_raw_inlines_query_and_raw_values(sq_builder: SQLiteCommandBuilder):
    sub = SelectQuery(
        sql="SELECT [[id]] FROM {{customer}} WHERE [[status]] = :status",
        params={"status": 1},
        columns=["id"],
    )
    r = sq_builder.raw(
        "SELECT :now, [[name]] FROM {{customer}} WHERE [[id]] IN :ids AND [[email]] = :email",
        {"ids": sub, "now": RawSql("CURRENT_TIMESTAMP"), "email": "a@x.com"},
    )
    assert r.sql == (
        "SELECT CURRENT_TIMESTAMP, `name` FROM `customer` "
        "WHERE `id` IN (SELECT `id` FROM `customer` WHERE `status` = :status) AND `email` = :email"
    )
    assert r.params.as_dict() == {"email": "a@x.com", "status": 1}


def test_raw_rejects_conflicting_nested_param(sq_builder: SQLiteCommandBuilder):
    sub = SelectQuery(sql="SELECT [[id]] FROM {{customer}} WHERE [[email]] = :email", params={"email": "b@x.com"}, columns=["id"])
    with pytest.raises(InvalidArgumentError):
        sq_builder.raw("SELECT :email, :ids", {"email": "a@x.com", "ids": sub})


def test_raw_positional_query_values_rejected(sq_builder: SQLiteCommandBuilder):
    with pytest.raises(InvalidArgumentError):
        sq_builder.raw("SELECT ?", [RawSql("1")])


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_factory_creates_registered_builders(snapshot):
    assert {"sqlite", "postgres", "mysql"} <= set(BuilderFactory.registered_dialects())
    builder = BuilderFactory.create("postgres", Quoter(SQLITE), snapshot)
    assert isinstance(builder, PostgresCommandBuilder)
    assert builder.dialect_name == "postgres"


def test_factory_unknown_dialect():
    with pytest.raises(ConfigurationError) as exc_info:
        BuilderFactory.create("oracle", Quoter(SQLITE))
    assert "oracle" in str(exc_info.value)


def test_factory_register_decorator():
    @BuilderFactory.register("sqlite_legacy")
    class LegacySQLiteBuilder(SQLiteCommandBuilder):
        def build_upsert_do_nothing(self, table, insert_sql, conflict):
            return insert_sql.replace("INSERT", "INSERT OR IGNORE", 1)

    try:
        builder = BuilderFactory.create("sqlite_legacy", Quoter(SQLITE), None)
        assert isinstance(builder, CommandBuilder)
        assert builder.dialect_name == "sqlite"
    finally:
        BuilderFactory._builders.pop("sqlite_legacy", None)
