import unittest
from datetime import timedelta

from jose import jwt

import support  # noqa: F401

from pda.core.security import (
    create_access_token,
    decode_access_token_payload,
    hash_password,
    strip_bearer_prefix,
    verify_password,
)


class PasswordHashTests(unittest.TestCase):
    def test_hash_is_salted_and_not_plaintext(self) -> None:
        first = hash_password("hunter22")
        second = hash_password("hunter22")
        self.assertNotIn("hunter22", first)
        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("hunter22", first))
        self.assertFalse(verify_password("hunter23", first))


class AccessTokenTests(unittest.TestCase):
    def test_token_carries_subject_and_one_hour_lifetime(self) -> None:
        token = create_access_token("user-1", username="strelok")
        payload = decode_access_token_payload(token)
        self.assertIsNotNone(payload)
        self.assertEqual(payload["sub"], "user-1")
        self.assertEqual(payload["username"], "strelok")
        self.assertEqual(payload["exp"] - payload["iat"], 3600)

    def test_expired_token_is_rejected(self) -> None:
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-5))
        self.assertIsNone(decode_access_token_payload(token))

    def test_token_signed_with_other_key_is_rejected(self) -> None:
        forged = jwt.encode({"sub": "user-1"}, "some-other-key", algorithm="HS256")
        self.assertIsNone(decode_access_token_payload(forged))
        self.assertIsNone(decode_access_token_payload("not-a-token"))

    def test_bearer_prefix_is_optional(self) -> None:
        self.assertEqual(strip_bearer_prefix("abc.def.ghi"), "abc.def.ghi")
        self.assertEqual(strip_bearer_prefix("Bearer abc.def.ghi"), "abc.def.ghi")
        self.assertEqual(strip_bearer_prefix("  bearer   abc.def.ghi "), "abc.def.ghi")


if __name__ == "__main__":
    unittest.main()
