import json
import unittest
from pydantic import ValidationError
from common.schemas.bookings import TravelerCountSchema
from common.utils.custom_response import send_custom_response, send_validation_error


class TestCustomResponse(unittest.TestCase):
    def test_envelope(self):
        response = send_custom_response(201, "created", {"id": "b1"})

        self.assertEqual(response["statusCode"], 201)
        self.assertEqual(response["headers"]["Content-Type"], "application/json")
        body = json.loads(response["body"])
        self.assertEqual(body, {"status_code": 201, "message": "created", "data": {"id": "b1"}})

    def test_envelope_without_data(self):
        body = json.loads(send_custom_response(404, "missing")["body"])
        self.assertIsNone(body["data"])

    def test_validation_error_lists_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            TravelerCountSchema.model_validate({"adults": 0, "children": -1})

        response = send_validation_error(ctx.exception)

        self.assertEqual(response["statusCode"], 400)
        body = json.loads(response["body"])
        fields = {detail["field"] for detail in body["data"]}
        self.assertEqual(fields, {"adults", "children"})
        self.assertIn("adults", body["message"])


if __name__ == "__main__":
    unittest.main()
