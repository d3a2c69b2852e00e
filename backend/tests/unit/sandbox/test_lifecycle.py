"""
Unit Tests for the project lifecycle
"""
import os

from app.modules.sandbox.lifecycle import ProjectLifecycle, get_lifecycle


class TestLifecycle:

    def test_absent_without_root(self, tmp_path):
        assert get_lifecycle(tmp_path / "missing") == ProjectLifecycle.ABSENT

    def test_building_without_entry_document(self, tmp_path):
        (tmp_path / "css").mkdir()

        assert get_lifecycle(tmp_path) == ProjectLifecycle.BUILDING

    def test_ready_with_index(self, tmp_path):
        (tmp_path / "index.html").write_text("<html></html>")

        assert get_lifecycle(tmp_path) == ProjectLifecycle.READY

    def test_index_directory_is_not_ready(self, tmp_path):
        (tmp_path / "index.html").mkdir()

        assert get_lifecycle(tmp_path) == ProjectLifecycle.BUILDING

    def test_symlinked_index_is_not_ready(self, tmp_path):
        target = tmp_path / "elsewhere.html"
        target.write_text("x")
        site = tmp_path / "site"
        site.mkdir()
        os.symlink(target, site / "index.html")

        assert get_lifecycle(site) == ProjectLifecycle.BUILDING

    def test_values_are_wire_strings(self):
        assert [s.value for s in ProjectLifecycle] == ["absent", "building", "ready"]
