import unittest
from unittest.mock import patch

from sqlalchemy import Table, inspect
from sqlalchemy.exc import IntegrityError, OperationalError

from app.services.review_store import (
    ReadFailedError,
    StoreNotConfiguredError,
    StoreUnavailableError,
    WriteFailedError,
    ensure_schema,
    insert_review,
    list_reviews,
)
from tests.support import make_session_factory


class TestReviewStore(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.db = self.factory()

    def tearDown(self) -> None:
        self.db.close()

    def test_ensure_schema_is_idempotent(self) -> None:
        ensure_schema(self.db)
        ensure_schema(self.db)
        other = self.factory()
        try:
            ensure_schema(other)
        finally:
            other.close()

        tables = inspect(self.db.connection()).get_table_names()
        self.assertEqual(tables.count("movie_reviews"), 1)

    def test_list_on_empty_table_returns_empty_list(self) -> None:
        ensure_schema(self.db)
        self.assertEqual(list_reviews(self.db), [])

    def test_insert_assigns_id_and_timestamp(self) -> None:
        ensure_schema(self.db)
        review = insert_review(self.db, "Ann", "Dune", "Great pacing")

        self.assertIsNotNone(review.id)
        self.assertIsNotNone(review.submitted_at)
        self.assertEqual(review.movie_name, "Dune")

    def test_ids_are_distinct_and_increasing(self) -> None:
        ensure_schema(self.db)
        first = insert_review(self.db, "Ann", "Dune", "Great pacing")
        second = insert_review(self.db, "Ann", "Dune", "Great pacing")

        self.assertGreater(second.id, first.id)
        self.assertEqual(len(list_reviews(self.db)), 2)

    def test_list_is_newest_first(self) -> None:
        ensure_schema(self.db)
        insert_review(self.db, "Ann", "Dune", "Great pacing")
        insert_review(self.db, "Bo", "Heat", "Tense")
        latest = insert_review(self.db, "Cy", "Alien", "Scary")

        rows = list_reviews(self.db)
        self.assertEqual(rows[0].id, latest.id)
        self.assertEqual([r.movie_name for r in rows], ["Alien", "Heat", "Dune"])

    def test_missing_session_means_not_configured(self) -> None:
        with self.assertRaises(StoreNotConfiguredError):
            ensure_schema(None)
        with self.assertRaises(StoreUnavailableError):
            list_reviews(None)
        with self.assertRaises(StoreUnavailableError):
            insert_review(None, "Ann", "Dune", "Great pacing")

    def test_insert_constraint_violation_is_write_failure(self) -> None:
        ensure_schema(self.db)
        with self.assertRaises(WriteFailedError):
            insert_review(self.db, None, "Dune", "Great pacing")
        # Session stays usable after the rollback
        self.assertEqual(list_reviews(self.db), [])

    def test_connection_error_on_insert_is_store_unavailable(self) -> None:
        ensure_schema(self.db)
        error = OperationalError("INSERT", {}, Exception("server closed the connection"))
        with patch.object(self.db, "commit", side_effect=error):
            with self.assertRaises(StoreUnavailableError):
                insert_review(self.db, "Ann", "Dune", "Great pacing")

    def test_concurrent_create_race_is_ignored_when_table_exists(self) -> None:
        ensure_schema(self.db)
        race = IntegrityError("CREATE TABLE", {}, Exception("duplicate key value pg_type"))
        with patch.object(Table, "create", side_effect=race):
            ensure_schema(self.db)

    def test_list_query_error_is_read_failure(self) -> None:
        ensure_schema(self.db)
        error = IntegrityError("SELECT", {}, Exception("boom"))
        with patch.object(self.db, "query", side_effect=error):
            with self.assertRaises(ReadFailedError):
                list_reviews(self.db)
