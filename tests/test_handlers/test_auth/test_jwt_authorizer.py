import importlib
import os
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
import jwt

SECRET = "testsecret"
METHOD_ARN = "arn:aws:execute-api:ap-south-1:123:api/test/GET/bookings"


def make_token(expires_in=timedelta(hours=1), **claims):
    payload = {"exp": datetime.now(timezone.utc) + expires_in, **claims}
    return jwt.encode(payload, SECRET, algorithm="HS256")


class JwtAuthorizerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"JWT_SECRET": SECRET, "JWT_ALGORITHM": "HS256"}, clear=False)
        cls.env.start()
        import handlers.auth.jwt_authorizer as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.env.stop()

    def _event(self, token=None, header="Authorization"):
        event = {"methodArn": METHOD_ARN, "headers": {}}
        if token:
            event["headers"][header] = f"Bearer {token}"
        return event

    def _effect(self, resp):
        return resp["policyDocument"]["Statement"][0]["Effect"]

    def test_missing_token_denies(self):
        resp = self.mod.lambda_handler(self._event(), None)
        self.assertEqual("Deny", self._effect(resp))
        self.assertEqual("unauthorized", resp["principalId"])

    def test_missing_headers_denies(self):
        resp = self.mod.lambda_handler({"methodArn": METHOD_ARN}, None)
        self.assertEqual("Deny", self._effect(resp))

    def test_admin_token_allows_with_context(self):
        token = make_token(user_id="a1", email="jane@x.com", name="Jane", role="ADMIN")

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Allow", self._effect(resp))
        self.assertEqual("a1", resp["principalId"])
        self.assertEqual(
            {"user_id": "a1", "email": "jane@x.com", "name": "Jane", "role": "ADMIN"},
            resp["context"],
        )
        self.assertEqual(
            "arn:aws:execute-api:ap-south-1:123:api/test/*/*",
            resp["policyDocument"]["Statement"][0]["Resource"],
        )

    def test_lowercase_header_and_id_claim(self):
        token = make_token(id="u7", email="ada@example.com")

        resp = self.mod.lambda_handler(self._event(token, header="authorization"), None)

        self.assertEqual("Allow", self._effect(resp))
        self.assertEqual("u7", resp["principalId"])
        self.assertEqual("CUSTOMER", resp["context"]["role"])

    def test_token_missing_user_id_denies(self):
        token = make_token(email="e@test.com", role="ADMIN")
        resp = self.mod.lambda_handler(self._event(token), None)
        self.assertEqual("Deny", self._effect(resp))

    def test_expired_token_denies(self):
        token = make_token(expires_in=timedelta(minutes=-5), user_id="a1", role="ADMIN")
        resp = self.mod.lambda_handler(self._event(token), None)
        self.assertEqual("Deny", self._effect(resp))

    def test_wrong_secret_denies(self):
        token = jwt.encode(
            {"user_id": "a1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "another-secret-value",
            algorithm="HS256",
        )
        resp = self.mod.lambda_handler(self._event(token), None)
        self.assertEqual("Deny", self._effect(resp))

    def test_token_without_exp_denies(self):
        token = jwt.encode({"user_id": "a1"}, SECRET, algorithm="HS256")
        resp = self.mod.lambda_handler(self._event(token), None)
        self.assertEqual("Deny", self._effect(resp))

    def test_unexpected_error_denies(self):
        with patch.object(self.mod.jwt, "decode", side_effect=Exception("fail")):
            resp = self.mod.lambda_handler(self._event("anything"), None)
        self.assertEqual("Deny", self._effect(resp))


if __name__ == "__main__":
    unittest.main()
