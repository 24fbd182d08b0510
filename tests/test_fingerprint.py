from __future__ import annotations

from memegen.shared.fingerprint import fingerprint, is_fingerprint
from memegen.specs.models.caption import CaptionRequest


def _req(source="http://img.test/a.png", top="", bottom="", white=False) -> CaptionRequest:
    return CaptionRequest(source=source, top=top, bottom=bottom, white=white)


def test_identical_requests_share_fingerprint() -> None:
    a = _req(top="ONE DOES NOT SIMPLY", bottom="WALK INTO MORDOR")
    b = _req(top="ONE DOES NOT SIMPLY", bottom="WALK INTO MORDOR")
    assert fingerprint(a) == fingerprint(b)


def test_fingerprint_is_fixed_length_hex() -> None:
    key = fingerprint(_req(top="x" * 5000))
    assert len(key) == 64
    assert is_fingerprint(key)


def test_each_field_changes_fingerprint() -> None:
    base = fingerprint(_req(top="a", bottom="b"))
    assert fingerprint(_req(source="http://img.test/b.png", top="a", bottom="b")) != base
    assert fingerprint(_req(top="A", bottom="b")) != base
    assert fingerprint(_req(top="a", bottom="B")) != base
    assert fingerprint(_req(top="a", bottom="b", white=True)) != base


def test_delimiter_inside_captions_does_not_collide() -> None:
    assert fingerprint(_req(top="a|b", bottom="c")) != fingerprint(_req(top="a", bottom="b|c"))
    assert fingerprint(_req(top="1:a", bottom="")) != fingerprint(_req(top="", bottom="1:a"))


def test_swapped_captions_differ() -> None:
    assert fingerprint(_req(top="up", bottom="down")) != fingerprint(_req(top="down", bottom="up"))


def test_is_fingerprint_rejects_paths() -> None:
    assert not is_fingerprint("../etc/passwd")
    assert not is_fingerprint("ABC")
