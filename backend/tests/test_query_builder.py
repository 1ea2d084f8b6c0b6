"""Tests for QueryBuilder statement generation."""

import pytest

from mastercrud.core.errors import NoFieldsProvided
from mastercrud.query.builder import QueryBuilder, Statement
from mastercrud.query.dialect import POSTGRESQL, SQLITE
from mastercrud.query.pagination import Pagination


@pytest.fixture
def customer(registry):
    return registry.resolve("customer")


@pytest.fixture
def pg():
    return QueryBuilder(POSTGRESQL)


@pytest.fixture
def lite():
    return QueryBuilder(SQLITE)


SELECT_CUSTOMER = (
    '"id", "kode", "nama", "alamat", "telepon", "email", '
    '"created_at", "updated_at", "deleted_at"'
)


class TestGetOne:
    def test_selects_all_fields_of_active_row(self, pg, customer):
        stmt = pg.build_get_one(customer, 7)
        assert stmt == Statement(
            f'SELECT {SELECT_CUSTOMER} FROM "customer"'
            ' WHERE "id" = %s AND "deleted_at" IS NULL',
            (7,),
        )

    def test_sqlite_uses_question_mark(self, lite, customer):
        stmt = lite.build_get_one(customer, 7)
        assert '"id" = ?' in stmt.sql
        assert "%s" not in stmt.sql


class TestGetList:
    def test_without_search(self, pg, customer):
        stmt = pg.build_get_list(customer, Pagination(page=3, limit=20))
        assert stmt.sql == (
            f'SELECT {SELECT_CUSTOMER} FROM "customer"'
            ' WHERE "deleted_at" IS NULL'
            ' ORDER BY "id" LIMIT %s OFFSET %s'
        )
        assert stmt.params == (20, 40)

    def test_search_covers_only_search_fields(self, pg, customer):
        stmt = pg.build_get_list(customer, Pagination(), "ali")
        assert (
            ' AND ("kode" ILIKE %s ESCAPE \'\\\' OR "nama" ILIKE %s ESCAPE \'\\\''
            ' OR "alamat" ILIKE %s ESCAPE \'\\\' OR "email" ILIKE %s ESCAPE \'\\\')'
        ) in stmt.sql
        assert '"telepon" ILIKE' not in stmt.sql
        assert stmt.params == ("%ali%",) * 4 + (10, 0)

    def test_search_never_touches_numeric_fields(self, pg, registry):
        produk = registry.resolve("produk")
        stmt = pg.build_get_list(produk, Pagination(), "10")
        assert '"harga" ILIKE' not in stmt.sql
        assert '"stok" ILIKE' not in stmt.sql
        assert '"created_at" ILIKE' not in stmt.sql

    def test_search_keeps_soft_delete_filter(self, pg, customer):
        stmt = pg.build_get_list(customer, Pagination(), "x")
        assert stmt.sql.index('"deleted_at" IS NULL') < stmt.sql.index("ILIKE")

    def test_blank_search_adds_no_filter(self, pg, customer):
        stmt = pg.build_get_list(customer, Pagination(), "   ")
        assert "ILIKE" not in stmt.sql
        assert stmt.params == (10, 0)

    def test_sqlite_uses_like(self, lite, customer):
        stmt = lite.build_get_list(customer, Pagination(), "ali")
        assert '"kode" LIKE ? ESCAPE' in stmt.sql
        assert "ILIKE" not in stmt.sql

    def test_count_uses_same_filter(self, pg, customer):
        listing = pg.build_get_list(customer, Pagination(limit=5), "ali")
        count = pg.build_count(customer, "ali")
        assert count.sql.startswith('SELECT COUNT(*) AS total FROM "customer" WHERE')
        where = count.sql.split(" WHERE ", 1)[1]
        assert where in listing.sql
        assert count.params == listing.params[:-2]


class TestCreate:
    def test_inserts_supplied_fields_only(self, pg, customer):
        stmt = pg.build_create(customer, {"nama": "Alice", "kode": "C1"})
        assert stmt.sql == (
            'INSERT INTO "customer" ("kode", "nama", "created_at", "updated_at")'
            " VALUES (%s, %s, NOW(), NOW())"
            f" RETURNING {SELECT_CUSTOMER}"
        )
        assert stmt.params == ("C1", "Alice")

    def test_ignores_server_controlled_and_unknown_fields(self, pg, customer):
        stmt = pg.build_create(
            customer,
            {
                "id": 99,
                "kode": "C1",
                "created_at": "2000-01-01T00:00:00",
                "updated_at": "2000-01-01T00:00:00",
                "deleted_at": "2000-01-01T00:00:00",
                "hacker": "1; DROP TABLE customer",
            },
        )
        assert stmt.params == ("C1",)
        assert '"hacker"' not in stmt.sql
        assert stmt.sql.count('"created_at"') == 2  # column list + RETURNING
        assert "2000-01-01" not in stmt.sql

    def test_empty_partial_still_stamps_timestamps(self, pg, customer):
        stmt = pg.build_create(customer, {})
        assert '("created_at", "updated_at") VALUES (NOW(), NOW())' in stmt.sql
        assert stmt.params == ()


class TestUpdate:
    def test_sets_supplied_fields_and_updated_at(self, pg, customer):
        stmt = pg.build_update(customer, 3, {"email": "a@b.co", "nama": "Bob"})
        assert stmt.sql == (
            'UPDATE "customer" SET "nama" = %s, "email" = %s, "updated_at" = NOW()'
            ' WHERE "id" = %s AND "deleted_at" IS NULL'
            f" RETURNING {SELECT_CUSTOMER}"
        )
        assert stmt.params == ("Bob", "a@b.co", 3)

    def test_no_fields_raises(self, pg, customer):
        with pytest.raises(NoFieldsProvided):
            pg.build_update(customer, 3, {"id": 5, "unknown": "x"})

    def test_allows_explicit_null(self, pg, customer):
        stmt = pg.build_update(customer, 3, {"alamat": None})
        assert stmt.params == (None, 3)


class TestSoftDeleteAndRestore:
    def test_soft_delete_scoped_to_active_rows(self, pg, customer):
        stmt = pg.build_soft_delete(customer, 4)
        assert stmt == Statement(
            'UPDATE "customer" SET "deleted_at" = NOW()'
            ' WHERE "id" = %s AND "deleted_at" IS NULL',
            (4,),
        )

    def test_restore_not_scoped_to_deleted_rows(self, pg, customer):
        stmt = pg.build_restore(customer, 4)
        assert stmt.sql == (
            'UPDATE "customer" SET "deleted_at" = NULL WHERE "id" = %s'
            f" RETURNING {SELECT_CUSTOMER}"
        )
        assert "IS NULL" not in stmt.sql
        assert "IS NOT NULL" not in stmt.sql

    def test_neither_touches_updated_at(self, pg, customer):
        assert '"updated_at"' not in pg.build_soft_delete(customer, 1).sql
        restore_sql = pg.build_restore(customer, 1).sql
        assert '"updated_at" =' not in restore_sql


class TestCreateTable:
    def test_postgres_ddl(self, pg, registry):
        stmt = pg.build_create_table(registry.resolve("produk"))
        assert stmt.sql.startswith('CREATE TABLE IF NOT EXISTS "produk" (')
        assert '"id" BIGSERIAL PRIMARY KEY' in stmt.sql
        assert '"kode" VARCHAR(255) NOT NULL' in stmt.sql
        assert '"harga" NUMERIC(18, 2)' in stmt.sql
        assert '"aktif" BOOLEAN' in stmt.sql
        assert '"created_at" TIMESTAMPTZ NOT NULL DEFAULT (NOW())' in stmt.sql
        assert '"deleted_at" TIMESTAMPTZ' in stmt.sql
        assert '"deleted_at" TIMESTAMPTZ NOT NULL' not in stmt.sql

    def test_sqlite_ddl(self, lite, registry):
        stmt = lite.build_create_table(registry.resolve("user"))
        assert stmt.sql.startswith('CREATE TABLE IF NOT EXISTS "user_pengguna" (')
        assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in stmt.sql
        assert '"tanggal_lahir" TEXT NOT NULL' in stmt.sql
