#!/usr/bin/env python3
"""
kubeswitch Switch Protocol and Matcher Tests

Tests the exact stdout lines read by the shell function, and the mapping of
fzf exit codes to distinct selection errors.
"""

import sys
import io
import logging
import subprocess
from pathlib import Path
from unittest.mock import patch

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Configure logging for tests
logging.basicConfig(level=logging.ERROR)  # Suppress most logs during testing

from kubeSwitch.core.context import KubeContext
from kubeSwitch.engine.fzf import FzfMatcher
from kubeSwitch.engine.protocol import CleanResult, SwitchProtocolEmitter, SwitchResult
from kubeSwitch.errors import MatcherError, MatcherMissingError, NoMatchError, SelectionCancelledError


def test_render_switch():
    print("🧪 Testing switch rendering...")
    ctx = KubeContext(name="links/pa", path="/home/u/.kube/config/links/pa", namespace="apps",
                      alias_link="prod/a")
    result = SwitchResult.from_context(ctx, "kubectl")
    lines = SwitchProtocolEmitter("k", export_kubeconfig=False).render(result)
    assert lines == [
        "__switch__",
        "k",
        "0",
        "0",
        "links/pa",
        "apps",
        "links/pa (prod/a) -> apps",
        "kubectl",
        "/home/u/.kube/config/links/pa",
    ]
    print("   ✅ Switch rendering working correctly")


def test_render_clean():
    print("🧪 Testing clean rendering...")
    assert SwitchProtocolEmitter("k", export_kubeconfig=True).render(CleanResult()) == ["__switch__", "k", "1", "1"]
    assert SwitchProtocolEmitter("kc").render(CleanResult()) == ["__switch__", "kc", "0", "1"]
    print("   ✅ Clean rendering working correctly")


def test_emit_writes_lines():
    print("🧪 Testing protocol emission...")
    stream = io.StringIO()
    result = SwitchResult("a", "default", "a -> default", "oc", "/s/a")
    SwitchProtocolEmitter("k", export_kubeconfig=True).emit(result, stream)
    assert stream.getvalue() == "__switch__\nk\n1\n0\na\ndefault\na -> default\noc\n/s/a\n"
    print("   ✅ Protocol emission working correctly")


def fzf_result(returncode, stdout=""):
    return subprocess.CompletedProcess(args=["fzf"], returncode=returncode, stdout=stdout)


def test_fzf_selection():
    print("🧪 Testing fzf selection...")
    with patch("kubeSwitch.engine.fzf.subprocess.run", return_value=fzf_result(0, "b\n")) as run:
        assert FzfMatcher().select(["a", "b", "c"]) == 1
        assert run.call_args[1]["input"] == "a\nb\nc\n"
        assert run.call_args[0][0] == ["fzf"]

    with patch("kubeSwitch.engine.fzf.subprocess.run", return_value=fzf_result(0, "zzz\n")):
        try:
            FzfMatcher().select(["a", "b"])
            raise AssertionError("unknown output should fail")
        except MatcherError as e:
            assert "zzz" in str(e)
    print("   ✅ fzf selection working correctly")


def test_fzf_failures_are_distinct():
    print("🧪 Testing fzf failure mapping...")
    expected = [
        (1, NoMatchError),
        (130, SelectionCancelledError),
        (2, MatcherError),
        (7, MatcherError),
    ]
    for code, error_class in expected:
        with patch("kubeSwitch.engine.fzf.subprocess.run", return_value=fzf_result(code)):
            try:
                FzfMatcher().select(["a"])
                raise AssertionError(f"exit code {code} should fail")
            except MatcherError as e:
                assert type(e) is error_class, f"exit {code}: got {type(e).__name__}"

    with patch("kubeSwitch.engine.fzf.subprocess.run", side_effect=FileNotFoundError("fzf")):
        try:
            FzfMatcher().select(["a"])
            raise AssertionError("missing fzf should fail")
        except MatcherMissingError as e:
            assert "install" in str(e)
    print("   ✅ fzf failures mapped to distinct errors")


def run_all_tests():
    print("🚀 Running Switch Protocol Tests")
    print("=" * 60)

    tests = [
        test_render_switch,
        test_render_clean,
        test_emit_writes_lines,
        test_fzf_selection,
        test_fzf_failures_are_distinct,
    ]

    passed = 0
    failed = 0
    for test_func in tests:
        try:
            test_func()
            passed += 1
        except Exception as e:
            print(f"   ❌ Test {test_func.__name__} failed with exception: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print("=" * 60)
    print(f"📊 Switch Protocol Test Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
