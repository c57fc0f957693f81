"""Tests for vellum package exports and metadata."""

import pytest

import vellum


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(vellum.__version__, str)
        assert vellum.__version__ == "0.1.0"

    def test_all_exports_resolvable(self) -> None:
        for name in vellum.__all__:
            getattr(vellum, name)

    def test_build_and_watch_are_callable(self) -> None:
        assert callable(vellum.build)
        assert callable(vellum.watch)

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            vellum.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
