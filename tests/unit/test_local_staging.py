"""
Test suite for LocalStagingManager.

System role: Verification of the filesystem staging area
"""

import os
import time
from pathlib import Path

import pytest

from docsync.boundary.staging.local_staging import (
    SECONDS_PER_DAY,
    LocalStagingManager,
    sanitize_name,
)
from docsync.core.exceptions import StagingError, StagingNotFoundError


def age_file(path: Path, days: float) -> None:
    stamp = time.time() - days * SECONDS_PER_DAY
    os.utime(path, (stamp, stamp))


class TestSanitizeName:
    """Test suite for sanitize_name()."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("report.pdf", "report.pdf"),
            ("My Report (final).pdf", "My_Report_final_.pdf"),
            ("__weird   name__.txt", "weird_name_.txt"),
            ("../../etc/passwd", ".._.._etc_passwd"),
            ("..", "file"),
            ("///", "file"),
        ],
    )
    def test_sanitize_name_should_replace_unsafe_characters(self, raw: str, expected: str) -> None:
        assert sanitize_name(raw) == expected


class TestSave:
    """Test suite for LocalStagingManager.save()."""

    def test_save_should_write_under_user_directory(self, staging: LocalStagingManager) -> None:
        # Act
        staged = staging.save("user-1", "abc", "Quarterly Report.pdf", b"%PDF-1.4")

        # Assert
        path = Path(staged.local_path)
        assert path.parent == staging.root / "user-1"
        assert path.name == "abc_Quarterly_Report.pdf"
        assert path.read_bytes() == b"%PDF-1.4"
        assert staged.size == 8

    def test_save_twice_should_leave_single_file_with_latest_content(
        self, staging: LocalStagingManager
    ) -> None:
        # Act
        first = staging.save("user-1", "abc", "a.txt", b"old")
        second = staging.save("user-1", "abc", "a.txt", b"new content")

        # Assert
        assert first.local_path == second.local_path
        assert Path(second.local_path).read_bytes() == b"new content"
        assert list((staging.root / "user-1").iterdir()) == [Path(second.local_path)]

    def test_save_should_encode_user_directory(self, staging: LocalStagingManager) -> None:
        staged = staging.save("../evil user", "abc", "a.txt", b"x")

        assert Path(staged.local_path).parent == staging.root / "..%2Fevil%20user"
        assert Path(staged.local_path).parent.parent == staging.root

    def test_distinct_user_ids_should_never_share_a_directory(self, staging: LocalStagingManager) -> None:
        # Arrange
        first = staging.save("a@b", "shared-id", "a.pdf", b"first")

        # Act
        second = staging.save("a#b", "shared-id", "a.pdf", b"second")

        # Assert
        assert first.local_path != second.local_path
        assert Path(first.local_path).read_bytes() == b"first"
        staging.delete(second.local_path)
        assert Path(first.local_path).exists()

    def test_remote_id_prefix_should_be_unambiguous(self, staging: LocalStagingManager) -> None:
        with_underscore = staging.local_path_for("user-1", "a_b", "x")
        plain = staging.local_path_for("user-1", "a", "b x")

        assert with_underscore != plain
        assert with_underscore.name == "a%5Fb_x"

    @pytest.mark.parametrize("user_id", [".", ".."])
    def test_dot_user_ids_should_stay_inside_root(self, staging: LocalStagingManager, user_id: str) -> None:
        assert staging.user_dir(user_id).parent == staging.root
        assert staging.user_dir(user_id).name.startswith("%2E")

    def test_empty_user_id_should_be_rejected(self, staging: LocalStagingManager) -> None:
        with pytest.raises(StagingError):
            staging.save("", "abc", "a.txt", b"x")

    def test_local_path_for_should_match_save(self, staging: LocalStagingManager) -> None:
        staged = staging.save("user-1", "abc", "a b.txt", b"x")

        assert staging.local_path_for("user-1", "abc", "a b.txt") == Path(staged.local_path)


class TestReadDelete:
    """Test suite for read(), exists(), delete() and file_size()."""

    def test_read_missing_file_should_raise_not_found(self, staging: LocalStagingManager) -> None:
        with pytest.raises(StagingNotFoundError):
            staging.read(staging.root / "missing.pdf")

    def test_delete_should_be_idempotent(self, staging: LocalStagingManager) -> None:
        # Arrange
        staged = staging.save("user-1", "abc", "a.txt", b"x")

        # Act & Assert
        assert staging.delete(staged.local_path) is True
        assert staging.delete(staged.local_path) is False
        assert staging.exists(staged.local_path) is False

    def test_file_size_should_be_zero_for_missing_file(self, staging: LocalStagingManager) -> None:
        assert staging.file_size(staging.root / "nope") == 0


class TestCleanupAndUsage:
    """Test suite for cleanup_older_than() and disk_usage()."""

    def test_cleanup_should_remove_only_old_files(self, staging: LocalStagingManager) -> None:
        # Arrange
        old = Path(staging.save("user-1", "old", "old.txt", b"1234").local_path)
        fresh = Path(staging.save("user-1", "new", "new.txt", b"12").local_path)
        age_file(old, days=8)
        age_file(fresh, days=6)

        # Act
        result = staging.cleanup_older_than(max_age_days=7)

        # Assert
        assert result.removed_files == 1
        assert result.freed_bytes == 4
        assert not old.exists()
        assert fresh.exists()
        assert result.removed_dirs == 0

    def test_cleanup_should_prune_emptied_user_directories(
        self, staging: LocalStagingManager
    ) -> None:
        # Arrange
        old = Path(staging.save("user-2", "old", "old.txt", b"x").local_path)
        age_file(old, days=30)

        # Act
        result = staging.cleanup_older_than(max_age_days=7)

        # Assert
        assert result.removed_dirs == 1
        assert not (staging.root / "user-2").exists()
        assert staging.root.exists()

    def test_cleanup_on_missing_root_should_be_noop(self, tmp_path: Path) -> None:
        manager = LocalStagingManager(root_dir=tmp_path / "does-not-exist")

        result = manager.cleanup_older_than(max_age_days=1)

        assert result.removed_files == 0

    def test_disk_usage_should_sum_all_users(self, staging: LocalStagingManager) -> None:
        # Arrange
        staging.save("user-1", "a", "a.txt", b"123")
        staging.save("user-2", "b", "b.txt", b"45678")

        # Act
        usage = staging.disk_usage()

        # Assert
        assert usage.file_count == 2
        assert usage.total_bytes == 8
