import unittest
from common.utils.custom_exceptions import Forbidden, Unauthorized
from common.utils.request_context import (
    get_authorizer,
    path_param,
    query_params,
    require_admin,
)


def event_with(authorizer):
    return {"requestContext": {"authorizer": authorizer}}


class TestRequireAdmin(unittest.TestCase):
    def test_admin_name_is_actor(self):
        actor = require_admin(event_with({"role": "ADMIN", "name": "Jane", "email": "jane@x.com"}))
        self.assertEqual(actor, "Jane")

    def test_email_used_when_name_missing(self):
        actor = require_admin(event_with({"role": "admin", "name": "", "email": "jane@x.com"}))
        self.assertEqual(actor, "jane@x.com")

    def test_missing_authorizer(self):
        with self.assertRaises(Unauthorized):
            require_admin({})

    def test_customer_forbidden(self):
        with self.assertRaises(Forbidden):
            require_admin(event_with({"role": "CUSTOMER", "name": "Ada"}))

    def test_unknown_role_forbidden(self):
        with self.assertRaises(Forbidden):
            require_admin(event_with({"role": "SUPERUSER", "name": "Ada"}))

    def test_admin_without_identity(self):
        with self.assertRaises(Unauthorized):
            require_admin(event_with({"role": "ADMIN"}))


class TestEventHelpers(unittest.TestCase):
    def test_get_authorizer_defaults_to_empty(self):
        self.assertEqual(get_authorizer({"requestContext": None}), {})

    def test_path_param_unquotes(self):
        event = {"pathParameters": {"email": "ada%40example.com"}}
        self.assertEqual(path_param(event, "email"), "ada@example.com")

    def test_path_param_missing(self):
        self.assertIsNone(path_param({"pathParameters": None}, "booking_id"))
        self.assertIsNone(path_param({"pathParameters": {"booking_id": ""}}, "booking_id"))

    def test_query_params_drop_empty_values(self):
        event = {"queryStringParameters": {"page": "2", "search": "", "status": None}}
        self.assertEqual(query_params(event), {"page": "2"})
        self.assertEqual(query_params({}), {})


if __name__ == "__main__":
    unittest.main()
