import unittest

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from support import add_user, make_session_factory

from pda.db.models import FriendRequest
from pda.services.social_service import social_service


class FriendRequestWorkflowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.alice = add_user(self.db, "alice")
        self.bob = add_user(self.db, "bob", faction="DUTY")

    def tearDown(self) -> None:
        self.db.close()

    def _friend_ids(self, user_id: str) -> list[str]:
        return [friend.id for friend in social_service.list_friends(self.db, user_id)]

    def test_request_to_self_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            social_service.send_friend_request(self.db, self.alice, self.alice.id)

    def test_request_to_unknown_user_is_not_found(self) -> None:
        with self.assertRaises(LookupError):
            social_service.send_friend_request(self.db, self.alice, "0" * 32)

    def test_second_pending_request_to_same_user_is_rejected(self) -> None:
        social_service.send_friend_request(self.db, self.alice, self.bob.id)
        with self.assertRaises(ValueError):
            social_service.send_friend_request(self.db, self.alice, self.bob.id)

    def test_pending_list_resolves_sender_profile(self) -> None:
        sent = social_service.send_friend_request(self.db, self.bob, self.alice.id)
        pending = social_service.list_pending_requests(self.db, self.alice.id)
        self.assertEqual(len(pending), 1)
        self.assertEqual(pending[0]["id"], sent["id"])
        self.assertEqual(pending[0]["status"], "PENDING")
        self.assertEqual(pending[0]["sender"]["username"], "bob")
        self.assertEqual(pending[0]["sender"]["faction"], "DUTY")
        self.assertEqual(social_service.list_pending_requests(self.db, self.bob.id), [])

    def test_accept_makes_friendship_symmetric_and_consumes_request(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        result = social_service.respond_to_friend_request(
            self.db, sent["id"], actor_user_id=self.bob.id, decision="ACCEPTED"
        )
        self.assertEqual(result["status"], "ACCEPTED")
        self.assertIsNotNone(result["resolved_at"])
        self.assertEqual(self._friend_ids(self.alice.id), [self.bob.id])
        self.assertEqual(self._friend_ids(self.bob.id), [self.alice.id])
        self.assertEqual(social_service.list_pending_requests(self.db, self.bob.id), [])

        with self.assertRaises(LookupError):
            social_service.respond_to_friend_request(
                self.db, sent["id"], actor_user_id=self.bob.id, decision="DECLINED"
            )

    def test_request_between_friends_is_rejected_in_both_directions(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        social_service.respond_to_friend_request(
            self.db, sent["id"], actor_user_id=self.bob.id, decision="ACCEPTED"
        )
        with self.assertRaises(ValueError):
            social_service.send_friend_request(self.db, self.alice, self.bob.id)
        with self.assertRaises(ValueError):
            social_service.send_friend_request(self.db, self.bob, self.alice.id)

    def test_decline_leaves_friend_lists_untouched(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        result = social_service.respond_to_friend_request(
            self.db, sent["id"], actor_user_id=self.bob.id, decision="DECLINED"
        )
        self.assertEqual(result["status"], "DECLINED")
        self.assertEqual(self._friend_ids(self.alice.id), [])
        self.assertEqual(self._friend_ids(self.bob.id), [])
        self.assertEqual(social_service.list_pending_requests(self.db, self.bob.id), [])

    def test_new_request_allowed_after_decline(self) -> None:
        first = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        social_service.respond_to_friend_request(
            self.db, first["id"], actor_user_id=self.bob.id, decision="DECLINED"
        )
        second = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        self.assertNotEqual(first["id"], second["id"])
        self.assertEqual(len(social_service.list_pending_requests(self.db, self.bob.id)), 1)

    def test_only_recipient_can_respond(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        with self.assertRaises(LookupError):
            social_service.respond_to_friend_request(
                self.db, sent["id"], actor_user_id=self.alice.id, decision="ACCEPTED"
            )

    def test_unknown_decision_is_rejected(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        with self.assertRaises(ValueError):
            social_service.respond_to_friend_request(
                self.db, sent["id"], actor_user_id=self.bob.id, decision="MAYBE"
            )
        status = self.db.scalar(select(FriendRequest.status).where(FriendRequest.id == sent["id"]))
        self.assertEqual(status, "PENDING")

    def test_decision_must_be_upper_case(self) -> None:
        sent = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        with self.assertRaises(ValueError):
            social_service.respond_to_friend_request(
                self.db, sent["id"], actor_user_id=self.bob.id, decision="accepted"
            )
        self.assertEqual(self._friend_ids(self.bob.id), [])

    def test_pending_pair_is_unique_at_database_level(self) -> None:
        self.db.add(FriendRequest(sender_id=self.alice.id, recipient_id=self.bob.id))
        self.db.commit()
        self.db.add(FriendRequest(sender_id=self.alice.id, recipient_id=self.bob.id))
        with self.assertRaises(IntegrityError):
            self.db.commit()
        self.db.rollback()

    def test_crossed_requests_both_resolve_cleanly(self) -> None:
        from_alice = social_service.send_friend_request(self.db, self.alice, self.bob.id)
        from_bob = social_service.send_friend_request(self.db, self.bob, self.alice.id)
        social_service.respond_to_friend_request(
            self.db, from_alice["id"], actor_user_id=self.bob.id, decision="ACCEPTED"
        )
        social_service.respond_to_friend_request(
            self.db, from_bob["id"], actor_user_id=self.alice.id, decision="ACCEPTED"
        )
        self.assertEqual(self._friend_ids(self.alice.id), [self.bob.id])
        self.assertEqual(self._friend_ids(self.bob.id), [self.alice.id])


if __name__ == "__main__":
    unittest.main()
