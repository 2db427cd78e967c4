"""ScopeGuard: end_access exactly once on every exit path, never after a denied begin."""
import pytest

from welcomekit.core.capability import AccessCapability
from welcomekit.core.exceptions import AccessDeniedError
from welcomekit.core.scope import ScopeGuard


class ScriptedProvider:
    def __init__(self, grant=True):
        self.grant = grant
        self.calls = []

    def begin_access(self, capability):
        self.calls.append(("begin", capability.key))
        return self.grant

    def end_access(self, capability):
        self.calls.append(("end", capability.key))


CAP = AccessCapability(key="/a/doc.txt", token=b"t")


def test_with_scope_returns_body_result():
    provider = ScriptedProvider()
    assert ScopeGuard(provider).with_scope(CAP, lambda: 42) == 42
    assert provider.calls == [("begin", CAP.key), ("end", CAP.key)]


def test_body_failure_still_releases_once():
    provider = ScriptedProvider()

    def body():
        raise ValueError("load failed")

    with pytest.raises(ValueError):
        ScopeGuard(provider).with_scope(CAP, body)
    assert provider.calls == [("begin", CAP.key), ("end", CAP.key)]


def test_denied_access_skips_body_and_release():
    provider = ScriptedProvider(grant=False)
    ran = []
    with pytest.raises(AccessDeniedError):
        ScopeGuard(provider).with_scope(CAP, lambda: ran.append(True))
    assert ran == []
    assert provider.calls == [("begin", CAP.key)]


def test_context_manager_releases_on_early_return():
    provider = ScriptedProvider()
    guard = ScopeGuard(provider)

    def work():
        with guard.scope(CAP) as cap:
            return cap.key

    assert work() == CAP.key
    assert provider.calls.count(("end", CAP.key)) == 1


def test_real_provider_balance(capabilities, make_file):
    cap = capabilities.create(make_file("doc.txt"))
    guard = ScopeGuard(capabilities)
    with pytest.raises(RuntimeError):
        with guard.scope(cap):
            assert capabilities.active_count(cap) == 1
            raise RuntimeError("interrupted")
    assert capabilities.active_count(cap) == 0
