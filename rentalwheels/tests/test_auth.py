import unittest
from unittest.mock import MagicMock, patch

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth

from rentalwheels.auth import (
    CallerIdentity,
    FirebaseIdentityVerifier,
    InMemoryIdentityVerifier,
    InvalidTokenError,
    get_current_identity,
)
from rentalwheels.dependencies import get_identity_verifier


class FirebaseIdentityVerifierTests(unittest.TestCase):
    def setUp(self):
        get_app = patch("rentalwheels.auth.firebase_admin.get_app")
        self.get_app = get_app.start()
        self.addCleanup(get_app.stop)
        verify = patch("rentalwheels.auth.firebase_auth.verify_id_token")
        self.verify_id_token = verify.start()
        self.addCleanup(verify.stop)

    def test_verified_token_yields_identity(self):
        self.verify_id_token.return_value = {"uid": "uid-a", "email": "a@x.com"}
        verifier = FirebaseIdentityVerifier()

        identity = verifier.verify("good-token")
        self.assertEqual(identity, CallerIdentity(uid="uid-a", email="a@x.com"))
        self.verify_id_token.assert_called_once_with(
            "good-token", app=self.get_app.return_value, check_revoked=False
        )

    def test_provider_errors_become_invalid_token(self):
        verifier = FirebaseIdentityVerifier()
        for error in (
            firebase_auth.InvalidIdTokenError("bad signature"),
            ValueError("malformed"),
        ):
            self.verify_id_token.side_effect = error
            with self.assertRaises(InvalidTokenError):
                verifier.verify("bad-token")

    def test_token_without_uid_is_rejected(self):
        self.verify_id_token.return_value = {"email": "a@x.com"}
        with self.assertRaises(InvalidTokenError):
            FirebaseIdentityVerifier().verify("token")

    @patch("rentalwheels.auth.firebase_admin.initialize_app")
    @patch("rentalwheels.auth.firebase_credentials.ApplicationDefault")
    def test_initializes_default_app_once(self, application_default, initialize_app):
        self.get_app.side_effect = ValueError("no app")
        verifier = FirebaseIdentityVerifier(project_id="rental-wheels")
        initialize_app.assert_called_once_with(
            application_default.return_value, {"projectId": "rental-wheels"}
        )
        self.assertIs(verifier.app, initialize_app.return_value)


class CurrentIdentityTests(unittest.TestCase):
    def setUp(self):
        app = FastAPI()

        @app.get("/whoami")
        def whoami(identity: CallerIdentity = Depends(get_current_identity)):
            return {"uid": identity.uid, "email": identity.email}

        self.verifier = MagicMock()
        app.dependency_overrides[get_identity_verifier] = lambda: self.verifier
        self.client = TestClient(app)

    def test_missing_header_skips_provider(self):
        response = self.client.get("/whoami")
        self.assertEqual(response.status_code, 401)
        self.verifier.verify.assert_not_called()

    def test_non_bearer_scheme_is_rejected(self):
        response = self.client.get("/whoami", headers={"Authorization": "Basic abc"})
        self.assertEqual(response.status_code, 401)
        self.verifier.verify.assert_not_called()

    def test_invalid_token_is_rejected(self):
        self.verifier.verify.side_effect = InvalidTokenError("expired")
        response = self.client.get("/whoami", headers={"Authorization": "Bearer old"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["www-authenticate"], "Bearer")

    def test_valid_token_attaches_identity(self):
        self.verifier.verify.return_value = CallerIdentity("uid-a", "a@x.com")
        response = self.client.get("/whoami", headers={"Authorization": "Bearer ok"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"uid": "uid-a", "email": "a@x.com"})
        self.verifier.verify.assert_called_once_with("ok")


class InMemoryIdentityVerifierTests(unittest.TestCase):
    def test_unknown_token(self):
        verifier = InMemoryIdentityVerifier()
        verifier.add_token("t", "uid-a", "a@x.com")
        self.assertEqual(verifier.verify("t").email, "a@x.com")
        with self.assertRaises(InvalidTokenError):
            verifier.verify("other")


if __name__ == "__main__":
    unittest.main()
