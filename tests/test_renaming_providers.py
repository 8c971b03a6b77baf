"""Tests for local rename providers and the directory conflict checker."""

from pathlib import Path

from mediaseq.renaming import (
    DirectoryConflictChecker,
    LocalDirectoryProvider,
    LocalRenameProvider,
    check_conflict,
)


def test_local_rename_moves_file_within_directory(tmp_path: Path) -> None:
    source = tmp_path / "IMG_1.jpg"
    source.write_bytes(b"data")

    outcome = LocalRenameProvider().rename(source, "photo001.jpg")

    assert outcome.success
    assert outcome.new_handle == tmp_path / "photo001.jpg"
    assert not source.exists()
    assert (tmp_path / "photo001.jpg").read_bytes() == b"data"


def test_local_rename_refuses_to_overwrite(tmp_path: Path) -> None:
    source = tmp_path / "a.jpg"
    source.write_bytes(b"a")
    (tmp_path / "b.jpg").write_bytes(b"b")

    outcome = LocalRenameProvider().rename(source, "b.jpg")

    assert not outcome.success
    assert outcome.error is not None and "already exists" in outcome.error
    assert (tmp_path / "b.jpg").read_bytes() == b"b"


def test_local_rename_reports_missing_source_and_bad_names(tmp_path: Path) -> None:
    provider = LocalRenameProvider()

    missing = provider.rename(tmp_path / "gone.jpg", "x.jpg")
    nested = provider.rename(tmp_path / "gone.jpg", "sub/x.jpg")

    assert not missing.success and "missing" in (missing.error or "")
    assert not nested.success and "Invalid file name" in (nested.error or "")


def test_batch_rename_never_aborts(tmp_path: Path) -> None:
    first = tmp_path / "one.jpg"
    first.write_bytes(b"1")
    third = tmp_path / "three.jpg"
    third.write_bytes(b"3")

    results = LocalRenameProvider().batch_rename(
        [(first, "p1.jpg"), (tmp_path / "two.jpg", "p2.jpg"), (third, "p3.jpg")]
    )

    assert [outcome.success for outcome in results.values()] == [True, False, True]


def test_directory_provider_checks(tmp_path: Path) -> None:
    file_path = tmp_path / "f.txt"
    file_path.write_text("x", encoding="utf-8")
    provider = LocalDirectoryProvider()

    assert provider.exists(tmp_path) and provider.is_dir(tmp_path)
    assert provider.exists(file_path) and not provider.is_dir(file_path)
    assert not provider.exists(tmp_path / "missing")


def test_checker_allows_renaming_to_own_name_in_other_case(tmp_path: Path) -> None:
    source = tmp_path / "photo001.JPG"
    source.write_bytes(b"x")
    checker = DirectoryConflictChecker()

    assert not checker.has_conflict(source, "photo001.jpg")


def test_checker_claims_names_until_reset(tmp_path: Path) -> None:
    a = tmp_path / "a.jpg"
    b = tmp_path / "b.jpg"
    a.write_bytes(b"a")
    b.write_bytes(b"b")
    checker = DirectoryConflictChecker()

    assert not checker.has_conflict(a, "new.jpg")
    assert checker.has_conflict(b, "NEW.jpg")

    checker.reset()
    assert not checker.has_conflict(b, "NEW.jpg")


def test_checker_sees_existing_siblings(tmp_path: Path) -> None:
    (tmp_path / "taken.jpg").write_bytes(b"x")
    source = tmp_path / "a.jpg"
    source.write_bytes(b"a")

    assert DirectoryConflictChecker().has_conflict(source, "Taken.JPG")


def test_check_conflict_treats_checker_errors_as_no_conflict(tmp_path: Path) -> None:
    # Listing a directory that does not exist raises inside the checker.
    handle = tmp_path / "missing-dir" / "a.jpg"

    assert check_conflict(DirectoryConflictChecker(), handle, "b.jpg") is False
