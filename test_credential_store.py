#!/usr/bin/env python3
"""
kubeswitch Credential Store Tests

Tests that the store walks nested kubeconfig directories, reads namespaces,
creates relocatable alias links and writes files atomically.
"""

import sys
import os
import logging
import shutil
import tempfile
from pathlib import Path

import yaml

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Configure logging for tests
logging.basicConfig(level=logging.ERROR)  # Suppress most logs during testing

from kubeSwitch.core.context import EnvironmentState
from kubeSwitch.errors import LinkFormatError, StoreError
from kubeSwitch.store.credential_store import CredentialStore, relative_link_target


def kubeconfig_yaml(namespace=None):
    """Minimal kubeconfig document with one context."""
    context = {"cluster": "main", "user": "main"}
    if namespace:
        context["namespace"] = namespace
    return yaml.safe_dump({
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "main",
        "contexts": [{"name": "main", "context": context}],
    })


def make_store(root, files, environment=None):
    for name, namespace in files.items():
        path = os.path.join(root, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(kubeconfig_yaml(namespace))
    return CredentialStore(root, environment)


def test_list_nested_contexts():
    """Every file is listed once, named relative to the root"""
    print("🧪 Testing nested listing...")
    with tempfile.TemporaryDirectory() as tmp:
        store = make_store(tmp, {
            "a": None,
            "prod/b": "kube-system",
            "prod/a": "apps",
            "prod/deep/x": None,
        })
        contexts = store.list()
        assert [c.name for c in contexts] == ["a", "prod/a", "prod/b", "prod/deep/x"]
        assert [c.namespace for c in contexts] == ["default", "apps", "kube-system", "default"]
        assert all(not c.name.startswith("/") for c in contexts)
        assert all(os.path.isabs(c.path) for c in contexts)

        sub = store.list("prod/deep")
        assert [c.name for c in sub] == ["prod/deep/x"]
    print("   ✅ Nested listing working correctly")


def test_missing_root_is_empty():
    print("🧪 Testing missing store root...")
    with tempfile.TemporaryDirectory() as tmp:
        store = CredentialStore(os.path.join(tmp, "nope"))
        assert store.list() == []
        assert store.list("prod") == []
    print("   ✅ Missing root treated as empty store")


def test_current_context_namespace_override():
    print("🧪 Testing current context detection...")
    with tempfile.TemporaryDirectory() as tmp:
        env = EnvironmentState(current_name="prod/a", current_namespace="override")
        store = make_store(tmp, {"prod/a": "apps", "prod/ab": "apps"}, env)
        by_name = {c.name: c for c in store.list()}
        assert by_name["prod/a"].current is True
        assert by_name["prod/a"].namespace == "override"
        assert by_name["prod/ab"].current is False
        assert by_name["prod/ab"].namespace == "apps"

        env = EnvironmentState(current_name="prod/a")
        store = CredentialStore(tmp, env)
        assert store.current().namespace == "apps"
        assert store.current().display == "prod/a -> apps"
    print("   ✅ Current context detection working correctly")


def test_load_and_new_context():
    print("🧪 Testing direct lookup...")
    with tempfile.TemporaryDirectory() as tmp:
        store = make_store(tmp, {"prod/a": "apps"})
        context = store.load("prod/a")
        assert context.name == "prod/a"
        assert context.namespace == "apps"
        assert store.load("prod/missing") is None

        try:
            store.load("prod")
            raise AssertionError("loading a directory should fail")
        except StoreError as e:
            assert e.path == os.path.join(tmp, "prod")

        assert store.is_directory("prod") is True
        assert store.is_directory("prod/a") is False
        assert store.is_directory("prod/missing") is False

        new = store.new_context("dev/new")
        assert new.path == os.path.join(tmp, "dev", "new")
        assert new.namespace == "default"
    print("   ✅ Direct lookup working correctly")


def test_path_cannot_escape_root():
    print("🧪 Testing path escape guard...")
    with tempfile.TemporaryDirectory() as tmp:
        store = CredentialStore(os.path.join(tmp, "store"))
        try:
            store.path_of("../outside")
            raise AssertionError("escaping the root should fail")
        except StoreError:
            pass
    print("   ✅ Path escape rejected")


def test_relative_link_target():
    print("🧪 Testing relative link target...")
    assert relative_link_target("/s/prod/a", "/s/links/pa") == os.path.join("..", "prod", "a")
    assert relative_link_target("/s/a", "/s/b") == "a"
    assert relative_link_target("/s/x/y/a", "/s/x/b/c/d") == os.path.join("..", "..", "y", "a")
    print("   ✅ Relative link target computed correctly")


def test_create_alias_survives_relocation():
    """The link resolves to the source wherever the store root lives"""
    print("🧪 Testing alias creation...")
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, "store")
        store = make_store(root, {"prod/a": "apps"})
        target = store.create_alias("prod/a:links/pa")
        link = os.path.join(root, "links", "pa")

        assert target == os.path.join("..", "prod", "a")
        assert os.path.islink(link)
        assert os.readlink(link) == target
        assert os.path.realpath(link) == os.path.realpath(os.path.join(root, "prod", "a"))

        alias = store.load("links/pa")
        assert alias.alias_link == "prod/a"
        assert alias.namespace == "apps"
        assert alias.display == "links/pa (prod/a) -> apps"

        moved = os.path.join(tmp, "moved")
        shutil.move(root, moved)
        assert os.path.realpath(os.path.join(moved, "links", "pa")) == \
            os.path.realpath(os.path.join(moved, "prod", "a"))
        assert CredentialStore(moved).load("links/pa").alias_link == "prod/a"
    print("   ✅ Alias creation working correctly")


def test_create_alias_errors():
    print("🧪 Testing alias creation errors...")
    with tempfile.TemporaryDirectory() as tmp:
        store = make_store(tmp, {"prod/a": None})
        for spec in ["prod/a", "a:b:c", ":b", "a:"]:
            try:
                store.create_alias(spec)
                raise AssertionError(f"'{spec}' should be rejected")
            except LinkFormatError:
                pass
        for spec in ["missing:x", "prod:x"]:
            try:
                store.create_alias(spec)
                raise AssertionError(f"'{spec}' should be rejected")
            except StoreError:
                pass
        assert not os.path.lexists(os.path.join(tmp, "x"))
    print("   ✅ Alias creation errors reported")


def test_link_outside_root_has_no_label():
    print("🧪 Testing links outside the store...")
    with tempfile.TemporaryDirectory() as tmp:
        root = os.path.join(tmp, "store")
        store = make_store(root, {"a": None})
        outside = os.path.join(tmp, "outside.yaml")
        with open(outside, "w") as f:
            f.write(kubeconfig_yaml("ext"))
        os.symlink(outside, os.path.join(root, "ext"))
        os.symlink(os.path.join(root, "gone"), os.path.join(root, "dangling"))

        by_name = {c.name: c for c in store.list()}
        assert by_name["ext"].alias_link is None
        assert by_name["ext"].namespace == "ext"
        assert by_name["dangling"].namespace == "default"
        assert by_name["dangling"].alias_link == "gone"
    print("   ✅ Outside links listed without label")


def test_write_read_delete():
    print("🧪 Testing write/read/delete...")
    with tempfile.TemporaryDirectory() as tmp:
        store = make_store(tmp, {"prod/a": "apps"})
        assert store.read_bytes("new/one") == b""

        path = store.write("new/one", kubeconfig_yaml("fresh").encode())
        assert path == os.path.join(tmp, "new", "one")
        assert store.load("new/one").namespace == "fresh"
        assert [n for n in os.listdir(os.path.join(tmp, "new")) if n.endswith(".tmp")] == []

        store.create_alias("prod/a:pa")
        store.write("pa", kubeconfig_yaml("through-link").encode())
        assert os.path.islink(os.path.join(tmp, "pa"))
        assert store.load("prod/a").namespace == "through-link"

        store.delete("pa")
        assert not os.path.lexists(os.path.join(tmp, "pa"))
        assert store.load("prod/a") is not None
        try:
            store.delete("pa")
            raise AssertionError("deleting a missing file should fail")
        except StoreError as e:
            assert "pa" in str(e)
    print("   ✅ Write/read/delete working correctly")


def run_all_tests():
    print("🚀 Running Credential Store Tests")
    print("=" * 60)

    tests = [
        test_list_nested_contexts,
        test_missing_root_is_empty,
        test_current_context_namespace_override,
        test_load_and_new_context,
        test_path_cannot_escape_root,
        test_relative_link_target,
        test_create_alias_survives_relocation,
        test_create_alias_errors,
        test_link_outside_root_has_no_label,
        test_write_read_delete,
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
    print(f"📊 Credential Store Test Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
