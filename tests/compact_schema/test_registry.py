from __future__ import annotations

import threading

import pytest

from compact_schema import registry
from compact_schema.declarations import FunctionDecl, RecordDecl
from compact_schema.generate import compact_schema, compact_signature
from compact_schema.registry import REGISTRY, DocumentationRegistry, RegistryEntry


@pytest.fixture(name="docs")
def _docs() -> DocumentationRegistry:
    return DocumentationRegistry()


def test_empty_registry(docs: DocumentationRegistry) -> None:
    assert docs.get_all_methods() == ()
    assert dict(docs.get_methods_by_category()) == {}
    assert docs.get_complete_documentation() == "# API Documentation\n\n## Data Models"


def test_methods_are_listed_in_registration_order(docs: DocumentationRegistry) -> None:
    docs.register_methods("UserAPI", ["getUserInfo() async throws -> UserInfo"])
    docs.register_methods("Session", ["refresh() throws", "close()"])
    assert docs.get_all_methods() == (
        "getUserInfo() async throws -> UserInfo",
        "refresh() throws",
        "close()",
    )
    assert list(docs.get_methods_by_category()) == ["UserAPI", "Session"]


def test_reregistering_replaces_in_place(docs: DocumentationRegistry) -> None:
    docs.register_methods("A", ["a()"])
    docs.register_methods("B", ["b()"])
    entry = docs.register_methods("A", ["a2()", "a3()"])
    assert entry == RegistryEntry("A", ("a2()", "a3()"))
    assert docs.get_all_methods() == ("a2()", "a3()", "b()")


def test_register_method_appends(docs: DocumentationRegistry) -> None:
    docs.register_method("Functions", "ping() -> Bool")
    docs.register_method("Functions", "pong()")
    assert docs.get_methods_by_category()["Functions"] == ("ping() -> Bool", "pong()")


def test_complete_documentation_layout(docs: DocumentationRegistry) -> None:
    docs.register_methods("UserAPI", ["getUserInfo() async throws -> UserInfo", "logout()"])
    docs.register_schema("TestUser", "TestUser {\n  id: String\n}")
    docs.register_schema("TestStatus", "enum TestStatus: [active | inactive]")
    assert docs.get_complete_documentation() == (
        "# API Documentation\n\n"
        "## Methods\n"
        "getUserInfo() async throws -> UserInfo\n"
        "logout()\n\n"
        "## Data Models\n"
        "TestUser {\n  id: String\n}\n\n"
        "enum TestStatus: [active | inactive]"
    )


def test_schemas_without_methods(docs: DocumentationRegistry) -> None:
    docs.register_schema("Empty", "Empty {\n}")
    assert docs.get_complete_documentation() == (
        "# API Documentation\n\n## Data Models\nEmpty {\n}"
    )


def test_snapshots_are_immutable(docs: DocumentationRegistry) -> None:
    docs.register_methods("A", ["a()"])
    by_category = docs.get_methods_by_category()
    with pytest.raises(TypeError):
        by_category["B"] = ("b()",)  # type: ignore[index]
    with pytest.raises(TypeError):
        docs.get_schemas()["X"] = "X {\n}"  # type: ignore[index]
    docs.register_methods("B", ["b()"])
    assert list(by_category) == ["A"]


def test_clear_resets_everything(docs: DocumentationRegistry) -> None:
    docs.register_methods("A", ["a()"])
    docs.register_schema("S", "S {\n}")
    docs.clear()
    assert docs.get_all_methods() == ()
    assert docs.get_entries() == ()
    assert dict(docs.get_schemas()) == {}


def test_generation_never_registers(test_user: RecordDecl) -> None:
    compact_schema(test_user)
    compact_signature(FunctionDecl(name="ping", return_type="Bool"))
    assert REGISTRY.get_all_methods() == ()
    assert dict(REGISTRY.get_schemas()) == {}


def test_module_level_helpers_use_shared_registry() -> None:
    registry.register_methods("UserAPI", ["getUserInfo() async throws -> UserInfo"])
    registry.register_method("Functions", "ping() -> Bool")
    registry.register_schema("Empty", "Empty {\n}")
    assert registry.get_all_methods() == (
        "getUserInfo() async throws -> UserInfo",
        "ping() -> Bool",
    )
    assert "UserAPI" in registry.get_methods_by_category()
    assert registry.get_complete_documentation().endswith("## Data Models\nEmpty {\n}")
    registry.clear()
    assert REGISTRY.get_all_methods() == ()


def test_concurrent_registration_keeps_every_category(docs: DocumentationRegistry) -> None:
    def register(index: int) -> None:
        for step in range(50):
            docs.register_method(f"Category{index}", f"method{step}()")

    threads = [threading.Thread(target=register, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    by_category = docs.get_methods_by_category()
    assert len(by_category) == 8
    assert all(len(signatures) == 50 for signatures in by_category.values())
    assert len(docs.get_all_methods()) == 400
