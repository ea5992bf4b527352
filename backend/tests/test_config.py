import unittest

from app.core.config import Settings


class TestSettings(unittest.TestCase):
    def test_postgres_scheme_is_normalized(self) -> None:
        s = Settings(_env_file=None, DATABASE_URL="postgres://u:p@ep-cool.neon.tech/db?sslmode=require")
        self.assertEqual(s.DATABASE_URL, "postgresql+psycopg2://u:p@ep-cool.neon.tech/db?sslmode=require")
        self.assertTrue(s.database_configured)

    def test_netlify_database_url_alias(self) -> None:
        s = Settings(_env_file=None, NETLIFY_DATABASE_URL="postgresql://neon/db")
        self.assertEqual(s.DATABASE_URL, "postgresql+psycopg2://neon/db")

    def test_empty_database_url_is_not_configured(self) -> None:
        s = Settings(_env_file=None, DATABASE_URL="")
        self.assertFalse(s.database_configured)

    def test_partial_netlify_settings_count_as_forms_configured(self) -> None:
        s = Settings(_env_file=None, NETLIFY_SITE_ID="site-123")
        self.assertTrue(s.forms_configured)

    def test_cors_origins_accept_comma_separated(self) -> None:
        s = Settings(_env_file=None, CORS_ORIGINS="https://a.com, https://b.com")
        self.assertEqual(s.CORS_ORIGINS, ["https://a.com", "https://b.com"])

    def test_explicit_driver_is_left_alone(self) -> None:
        s = Settings(_env_file=None, DATABASE_URL="postgresql+psycopg2://neon/db")
        self.assertEqual(s.DATABASE_URL, "postgresql+psycopg2://neon/db")
        s = Settings(_env_file=None, DATABASE_URL="sqlite:///reviews.db")
        self.assertEqual(s.DATABASE_URL, "sqlite:///reviews.db")
