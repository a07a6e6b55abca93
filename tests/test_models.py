"""Tests for release_bump.models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from release_bump.models import (
    BumpKind,
    Package,
    PublishFailure,
    ReleasePlan,
    ReleaseReport,
    ReleaseRequest,
    Version,
)


class TestVersion:
    def test_str_without_prerelease(self) -> None:
        assert str(Version(major=1, minor=0, patch=2)) == "1.0.2"

    def test_str_with_prerelease(self) -> None:
        v = Version(major=1, minor=0, patch=2, prerelease_tag="rc", prerelease_number=3)
        assert str(v) == "1.0.2-rc.3"
        assert v.is_prerelease

    def test_counter_requires_tag(self) -> None:
        with pytest.raises(ValidationError):
            Version(major=1, minor=0, patch=0, prerelease_number=1)

    def test_negative_component_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Version(major=-1, minor=0, patch=0)

    def test_is_frozen(self) -> None:
        v = Version(major=1, minor=0, patch=0)
        with pytest.raises(ValidationError):
            v.major = 2  # type: ignore[misc]


class TestReleaseRequest:
    def test_defaults(self) -> None:
        request = ReleaseRequest(bump=BumpKind.PATCH)
        assert request.packages == []
        assert request.publish is None
        assert request.generate_changelog is True

    def test_bump_from_string(self) -> None:
        assert ReleaseRequest(bump="rc").bump is BumpKind.RC


class TestReleaseReport:
    def test_ok_without_publish_failures(self) -> None:
        plan = ReleasePlan(current_version="1.0.0", target_version="1.0.1")
        assert ReleaseReport(plan=plan).ok

    def test_not_ok_with_publish_failure(self) -> None:
        plan = ReleasePlan(
            current_version="1.0.0",
            target_version="1.0.1",
            packages=(Package(name="a", path=Path("a"), manifest_path=Path("a/package.json")),),
        )
        report = ReleaseReport(plan=plan)
        report.publish_failures.append(
            PublishFailure(package="a", command="npm publish", returncode=1)
        )
        assert not report.ok
