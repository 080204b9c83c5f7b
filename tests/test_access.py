"""Tests for the client access gate and the owner's key reveal throttle."""

import threading
import time

import pytest

from esign.core.security import generate_secret_key, keys_match, normalize_key
from esign.lifecycle.access import InMemoryKeyRevealCounter, KeyRevealCounter, KeyRevealThrottle
from esign.lifecycle.errors import (
    ACCESS_DENIED_MESSAGE,
    AccessDenied,
    NotFound,
    RevealLimitReached,
)

OWNER_ID = "owner-1"


class TestClientAccessGate:
    def test_matching_key_opens_document(self, service, make_draft):
        doc = make_draft()
        key = service.share_document(OWNER_ID, doc.id).secret_key
        assert service.gate.open(doc.id, key).id == doc.id

    def test_unknown_id_and_wrong_key_are_indistinguishable(self, service, make_draft):
        doc = make_draft()
        service.share_document(OWNER_ID, doc.id)

        with pytest.raises(AccessDenied) as wrong_key:
            service.gate.open(doc.id, "NOTTHEKEY000")
        with pytest.raises(AccessDenied) as unknown_id:
            service.gate.open("no-such-document", "NOTTHEKEY000")

        assert str(wrong_key.value) == str(unknown_id.value) == ACCESS_DENIED_MESSAGE
        assert wrong_key.value.context == unknown_id.value.context == {}

    @pytest.mark.parametrize("submitted", [None, "", "   "])
    def test_blank_key_is_denied(self, service, make_draft, submitted):
        doc = make_draft()
        service.share_document(OWNER_ID, doc.id)
        with pytest.raises(AccessDenied):
            service.gate.open(doc.id, submitted)

    def test_unshared_draft_is_denied(self, service, make_draft):
        doc = make_draft()
        with pytest.raises(AccessDenied):
            service.gate.open(doc.id, "")


class TestKeyHelpers:
    def test_generated_key_shape(self):
        key = generate_secret_key()
        assert len(key) == 12
        assert key == key.upper()
        assert key.isalnum()
        assert len(generate_secret_key(20)) == 20

    def test_normalize_key(self):
        assert normalize_key("  ab12cd ") == "AB12CD"
        assert normalize_key(None) == ""

    @pytest.mark.parametrize(
        "stored,submitted,expected",
        [
            ("AB12CD34EF56", "AB12CD34EF56", True),
            ("AB12CD34EF56", " ab12cd34ef56\n", True),
            ("AB12CD34EF56", "AB12CD34EF57", False),
            ("AB12CD34EF56", "AB12CD", False),
            (None, "AB12CD34EF56", False),
            (None, None, False),
            ("", "", False),
        ],
    )
    def test_keys_match(self, stored, submitted, expected):
        assert keys_match(stored, submitted) is expected


class TestKeyRevealThrottle:
    def test_counter_satisfies_protocol(self):
        assert isinstance(InMemoryKeyRevealCounter(), KeyRevealCounter)

    def test_limit_per_client_instance(self, service, make_draft):
        doc = make_draft()
        key = service.share_document(OWNER_ID, doc.id).secret_key
        throttle = KeyRevealThrottle(InMemoryKeyRevealCounter(), limit=3)

        reveals = [throttle.reveal(doc, "browser-a") for _ in range(3)]
        assert [r.views_remaining for r in reveals] == [2, 1, 0]
        assert all(r.secret_key == key for r in reveals)

        with pytest.raises(RevealLimitReached):
            throttle.reveal(doc, "browser-a")

        # another browser profile has its own budget
        assert throttle.reveal(doc, "browser-b").views_used == 1
        assert throttle.remaining(doc.id, "browser-a") == 0
        assert throttle.remaining(doc.id, "browser-b") == 2

    def test_reset_restores_budget(self, service, make_draft):
        doc = make_draft()
        service.share_document(OWNER_ID, doc.id)
        throttle = KeyRevealThrottle(InMemoryKeyRevealCounter(), limit=1)

        throttle.reveal(doc, "browser-a")
        with pytest.raises(RevealLimitReached):
            throttle.reveal(doc, "browser-a")
        throttle.reset(doc.id, "browser-a")
        assert throttle.reveal(doc, "browser-a").views_remaining == 0

    def test_no_key_issued(self, make_draft):
        doc = make_draft()
        throttle = KeyRevealThrottle(InMemoryKeyRevealCounter())
        with pytest.raises(NotFound):
            throttle.reveal(doc, "browser-a")
        assert throttle.remaining(doc.id, "browser-a") == 3

    def test_throttle_does_not_gate_client_access(self, service, make_draft):
        doc = make_draft()
        key = service.share_document(OWNER_ID, doc.id).secret_key
        throttle = KeyRevealThrottle(InMemoryKeyRevealCounter(), limit=1)
        throttle.reveal(doc, "browser-a")
        with pytest.raises(RevealLimitReached):
            throttle.reveal(doc, "browser-a")
        assert service.access_document(doc.id, key).id == doc.id


def test_key_for_another_document_is_denied(service, make_draft):
    first = make_draft(title="First")
    second = make_draft(title="Second")
    first_key = service.share_document(OWNER_ID, first.id).secret_key
    service.share_document(OWNER_ID, second.id)

    with pytest.raises(AccessDenied) as exc_info:
        service.gate.open(second.id, first_key)
    assert str(exc_info.value) == ACCESS_DENIED_MESSAGE


class _SlowDict(dict):
    def get(self, key, default=None):
        time.sleep(0.02)
        return super().get(key, default)


def test_concurrent_reveals_respect_limit(service, make_draft):
    doc = make_draft()
    service.share_document(OWNER_ID, doc.id)
    counter = InMemoryKeyRevealCounter()
    counter._counts = _SlowDict()
    throttle = KeyRevealThrottle(counter, limit=3)

    barrier = threading.Barrier(6)
    granted, refused = [], []

    def reveal():
        barrier.wait()
        try:
            granted.append(throttle.reveal(doc, "browser-a").views_used)
        except RevealLimitReached:
            refused.append(True)

    threads = [threading.Thread(target=reveal) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(granted) == [1, 2, 3]
    assert len(refused) == 3
