import unittest
from datetime import datetime, timedelta, timezone

from support import add_user, make_session_factory

from pda.db.models import Message
from pda.services import message_service
from pda.services.pagination import PageWindow, normalize_page


class PaginationTests(unittest.TestCase):
    def test_offset_and_total_pages(self) -> None:
        window = PageWindow(page=3, limit=10)
        self.assertEqual(window.offset, 20)
        self.assertEqual(window.total_pages(25), 3)
        self.assertEqual(window.total_pages(30), 3)
        self.assertEqual(window.total_pages(0), 0)

    def test_normalize_page_applies_defaults_and_cap(self) -> None:
        self.assertEqual(normalize_page(None, None, default_limit=10, max_limit=100), PageWindow(1, 10))
        self.assertEqual(normalize_page(2, 500, default_limit=10, max_limit=100), PageWindow(2, 100))
        self.assertEqual(normalize_page(0, 0, default_limit=10, max_limit=100), PageWindow(1, 10))


class MessageServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.alice = add_user(self.db, "alice")
        self.bob = add_user(self.db, "bob")
        self.carol = add_user(self.db, "carol")

    def tearDown(self) -> None:
        self.db.close()

    def _seed_global(self, count: int) -> None:
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for index in range(count):
            self.db.add(
                Message(
                    user_id=self.alice.id,
                    content=f"message {index}",
                    created_at=base + timedelta(minutes=index),
                )
            )
        self.db.commit()

    def test_global_pagination_is_newest_first(self) -> None:
        self._seed_global(25)
        pages = [
            message_service.list_global_messages(self.db, PageWindow(page=page, limit=10))
            for page in (1, 2, 3)
        ]
        self.assertEqual([len(page["messages"]) for page in pages], [10, 10, 5])
        for page in pages:
            self.assertEqual(page["metadata"]["total_pages"], 3)
            self.assertEqual(page["metadata"]["total_messages"], 25)
            self.assertEqual(page["metadata"]["limit"], 10)
        self.assertEqual(pages[0]["metadata"]["current_page"], 1)
        self.assertEqual(pages[0]["messages"][0]["content"], "message 24")
        self.assertEqual(pages[2]["messages"][-1]["content"], "message 0")

    def test_global_feed_excludes_direct_messages(self) -> None:
        message_service.post_message(self.db, self.alice, "hello zone")
        message_service.post_message(self.db, self.alice, "psst", recipient_id=self.bob.id)
        page = message_service.list_global_messages(self.db, PageWindow(1, 10))
        self.assertEqual([m["content"] for m in page["messages"]], ["hello zone"])
        self.assertEqual(page["messages"][0]["author"]["username"], "alice")

    def test_direct_conversation_covers_both_directions_only(self) -> None:
        message_service.post_message(self.db, self.alice, "to bob", recipient_id=self.bob.id)
        message_service.post_message(self.db, self.bob, "to alice", recipient_id=self.alice.id)
        message_service.post_message(self.db, self.carol, "to alice from carol", recipient_id=self.alice.id)

        page = message_service.list_direct_messages(self.db, self.alice.id, self.bob.id, PageWindow(1, 10))
        self.assertEqual(page["total_messages"], 2)
        self.assertEqual(page["total_pages"], 1)
        self.assertEqual({m["content"] for m in page["messages"]}, {"to bob", "to alice"})

    def test_direct_conversation_requires_recipient(self) -> None:
        with self.assertRaises(ValueError):
            message_service.list_direct_messages(self.db, self.alice.id, "", PageWindow(1, 10))

    def test_post_to_unknown_recipient_is_not_found(self) -> None:
        with self.assertRaises(LookupError):
            message_service.post_message(self.db, self.alice, "hello?", recipient_id="f" * 32)

    def test_anonymous_flag_is_stored(self) -> None:
        message = message_service.post_message(self.db, self.alice, "who am i", is_anonymous=True)
        self.assertTrue(message["is_anonymous"])
        self.assertIsNone(message["recipient_id"])


if __name__ == "__main__":
    unittest.main()
