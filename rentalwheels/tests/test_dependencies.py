import os
import unittest
from unittest.mock import patch

from rentalwheels import dependencies
from rentalwheels.auth import InMemoryIdentityVerifier
from rentalwheels.config import Settings, get_settings
from rentalwheels.db import InMemoryDbClient


class SettingsTests(unittest.TestCase):
    @patch.dict(os.environ, {"URI": "mongodb://db:27017", "PORT": "8080"}, clear=True)
    def test_reads_legacy_uri_and_port(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.database_url, "mongodb://db:27017")
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.database_name, "rentalwheels")

    @patch.dict(
        os.environ,
        {"MONGODB_URI": "mongodb://primary", "URI": "mongodb://legacy"},
        clear=True,
    )
    def test_mongodb_uri_takes_precedence(self):
        self.assertEqual(Settings(_env_file=None).database_url, "mongodb://primary")


class DependencyTests(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()
        dependencies.close_clients()
        self.addCleanup(get_settings.cache_clear)
        self.addCleanup(dependencies.close_clients)

    @patch.dict(os.environ, {"RENTALWHEELS_USE_IN_MEMORY_BACKENDS": "true"}, clear=True)
    def test_in_memory_backends(self):
        db = dependencies.get_db_client()
        self.assertIsInstance(db, InMemoryDbClient)
        self.assertIs(dependencies.get_db_client(), db)
        self.assertIsInstance(
            dependencies.get_identity_verifier(), InMemoryIdentityVerifier
        )

    @patch.dict(os.environ, {"MONGODB_URI": "mongodb://db:27017"}, clear=True)
    @patch("rentalwheels.dependencies.MongoDbClient")
    def test_mongo_client_when_uri_configured(self, mongo_cls):
        db = dependencies.get_db_client()
        mongo_cls.assert_called_once_with("mongodb://db:27017", "rentalwheels")
        self.assertIs(db, mongo_cls.return_value)

        dependencies.close_clients()
        mongo_cls.return_value.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
