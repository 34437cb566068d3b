# tests/unit/services/test_redirect_policy.py
from __future__ import annotations

import pytest
from credkeep.services._shared.errors import RedirectNotAllowedError
from credkeep.services.redirects import RedirectPolicy, is_allowed


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://good.com/path", True),
        ("https://good.com", True),
        ("https://good.community", True),
        ("https://evil.com", False),
        ("http://good.com/path", False),
        ("HTTPS://GOOD.COM/path", False),
    ],
)
def test_wildcard_entry_matches_prefix(url, expected):
    assert is_allowed(url, ["https://good.com*"]) is expected


def test_empty_or_missing_allow_list_allows_anything():
    assert is_allowed("https://anything.example", []) is True
    assert is_allowed("https://anything.example", None) is True
    assert is_allowed("https://anything.example", [""]) is True


def test_exact_entry_requires_full_match():
    allow = ["https://app.example.com/welcome"]

    assert is_allowed("https://app.example.com/welcome", allow) is True
    assert is_allowed("https://app.example.com/welcome/extra", allow) is False


def test_star_in_the_middle_is_literal():
    allow = ["https://*.example.com/cb"]

    assert is_allowed("https://*.example.com/cb", allow) is True
    assert is_allowed("https://app.example.com/cb", allow) is False


def test_any_entry_may_match():
    allow = ["https://a.com/x", "https://b.com*"]

    assert is_allowed("https://b.com/y", allow) is True
    assert is_allowed("https://a.com/x", allow) is True
    assert is_allowed("https://c.com", allow) is False


def test_policy_ensure_allowed_raises_for_rejected_url():
    policy = RedirectPolicy(["https://good.com*"])

    assert policy.ensure_allowed("https://good.com/ok") == "https://good.com/ok"
    with pytest.raises(RedirectNotAllowedError) as exc:
        policy.ensure_allowed("https://evil.com")
    assert exc.value.url == "https://evil.com"


def test_policy_from_mapping_accepts_list_or_comma_string():
    from_list = RedirectPolicy.from_mapping({"REDIRECT_ALLOW_LIST": ["https://good.com*"]})
    from_str = RedirectPolicy.from_mapping({"REDIRECT_ALLOW_LIST": "https://good.com*, https://x.io/cb"})
    open_policy = RedirectPolicy.from_mapping({})

    assert from_list.allow_list == ("https://good.com*",)
    assert from_str.allow_list == ("https://good.com*", "https://x.io/cb")
    assert open_policy.is_allowed("https://evil.com") is True
