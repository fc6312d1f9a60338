"""Shared fixtures for compact schema tests."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import pytest

from compact_schema.declarations import (
    CaseDecl,
    ContainerDecl,
    FunctionDecl,
    ParameterDecl,
    PropertyDecl,
    RecordDecl,
    UnionDecl,
    Visibility,
)
from compact_schema.registry import REGISTRY

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

SAMPLE_DOCUMENT = """\
declarations:
  - kind: record
    name: TestUser
    members:
      - {name: id, type: String}
      - {name: email, type: "String?"}
      - {name: tags, type: "Array<String>"}
      - {name: description, type: String, computed: true}
  - kind: union
    name: TestStatus
    cases:
      - {name: active, raw_value: '"active"'}
      - {name: inactive, raw_value: '"inactive"'}
  - kind: function
    name: ping
    return_type: Bool
  - kind: container
    name: UserAPI
    members:
      - kind: function
        name: getUserInfo
        is_async: true
        is_throwing: true
        return_type: UserInfo
        visibility: public
      - kind: function
        name: updateProfile
        is_async: true
        is_throwing: true
        return_type: UserInfo
        visibility: open
        parameters:
          - {label: _, name: request, type: UpdateProfileRequest}
      - kind: function
        name: refreshToken
        visibility: private
"""


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("COMPACT_SCHEMA_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _reset_registry() -> Iterator[None]:
    REGISTRY.clear()
    yield
    REGISTRY.clear()


@pytest.fixture(name="test_user")
def _test_user() -> RecordDecl:
    return RecordDecl(
        name="TestUser",
        members=(
            PropertyDecl("id", "String"),
            PropertyDecl("name", "String"),
            PropertyDecl("email", "String?"),
            PropertyDecl("isActive", "Bool"),
            PropertyDecl("tags", "[String]"),
            PropertyDecl("metadata", "[String: String]"),
        ),
    )


@pytest.fixture(name="test_status")
def _test_status() -> UnionDecl:
    return UnionDecl(
        name="TestStatus",
        cases=(
            CaseDecl("active", '"active"'),
            CaseDecl("inactive", '"inactive"'),
            CaseDecl("pending", '"pending"'),
        ),
    )


@pytest.fixture(name="user_api")
def _user_api() -> ContainerDecl:
    return ContainerDecl(
        name="UserAPI",
        members=(
            FunctionDecl(
                name="getUserInfo",
                is_async=True,
                is_throwing=True,
                return_type="UserInfo",
                visibility=Visibility.PUBLIC,
            ),
            FunctionDecl(name="cacheKey", return_type="String", visibility=Visibility.PRIVATE),
            FunctionDecl(
                name="move",
                parameters=(
                    ParameterDecl("Int", label="from", name="source"),
                    ParameterDecl("Int", label="to", name="destination"),
                ),
                visibility=Visibility.OPEN,
            ),
            FunctionDecl(name="resetCache", visibility=Visibility.INTERNAL),
            FunctionDecl(
                name="updateProfile",
                parameters=(ParameterDecl("UpdateProfileRequest", label="_", name="request"),),
                is_async=True,
                is_throwing=True,
                return_type="UserInfo",
                visibility=Visibility.PUBLIC,
            ),
        ),
    )


@pytest.fixture(name="sample_document")
def _sample_document(tmp_path: Path) -> Path:
    path = tmp_path / "declarations.yaml"
    path.write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    return path
