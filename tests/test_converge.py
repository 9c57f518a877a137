import os

import pytest

from ctxdaemon.converge import (
    InodeRef,
    file_exists,
    order_paths_by_presence,
    pick_rename_source,
    should_update_inode_stamp,
)


def test_default_inode_ref_is_zero():
    assert InodeRef().is_zero() is True


@pytest.mark.parametrize(
    "ref",
    [InodeRef(device="dev", inode=7), InodeRef(device="", inode=3), InodeRef(device="dev", inode=0)],
)
def test_populated_inode_ref_is_not_zero(ref):
    assert ref.is_zero() is False


def test_inode_refs_compare_by_value():
    assert InodeRef("dev", 9) == InodeRef("dev", 9)
    assert InodeRef("dev", 9) != InodeRef("dev", 10)


def test_zero_stamp_never_updates():
    inodes = {"a.go": InodeRef("dev", 1)}
    assert should_update_inode_stamp(inodes, "a.go", InodeRef()) is False
    assert should_update_inode_stamp({}, "a.go", InodeRef()) is False


def test_missing_entry_needs_stamp():
    assert should_update_inode_stamp({}, "a.go", InodeRef("dev", 1)) is True


def test_same_stamp_is_not_stale():
    inodes = {"a.go": InodeRef("dev", 1)}
    assert should_update_inode_stamp(inodes, "a.go", InodeRef("dev", 1)) is False


def test_changed_stamp_is_stale():
    inodes = {"a.go": InodeRef("dev", 1)}
    assert should_update_inode_stamp(inodes, "a.go", InodeRef("dev", 2)) is True


def test_pick_rename_source_finds_hash_match():
    hashes = {"src.go": "h1", "other.go": "h2"}
    assert pick_rename_source(["other.go", "src.go"], hashes, "h1") == "src.go"


def test_pick_rename_source_prefers_first_match():
    hashes = {"a.go": "h1", "b.go": "h1"}
    assert pick_rename_source(["b.go", "a.go"], hashes, "h1") == "b.go"


def test_pick_rename_source_without_match_is_empty():
    hashes = {"a.go": "h1"}
    assert pick_rename_source(["a.go"], hashes, "h9") == ""
    assert pick_rename_source([], hashes, "h1") == ""


def test_file_exists_for_file_and_missing(tmp_path):
    present = tmp_path / "main.go"
    present.write_text("package main\n")
    assert file_exists(present) is True
    assert file_exists(str(present)) is True
    assert file_exists(tmp_path / "gone.go") is False


def test_file_exists_counts_dangling_symlink(tmp_path):
    link = tmp_path / "link.go"
    os.symlink(tmp_path / "nowhere.go", link)
    assert file_exists(link) is True


def test_order_puts_present_paths_first(tmp_path):
    (tmp_path / "dst.go").write_text("package main\n")
    (tmp_path / "b.go").write_text("package main\n")
    ordered = order_paths_by_presence(tmp_path, ["src.go", "dst.go", "a.go", "b.go"])
    assert ordered == ["b.go", "dst.go", "a.go", "src.go"]


def test_order_keeps_inputs_and_does_not_mutate(tmp_path):
    (tmp_path / "x.go").write_text("package main\n")
    paths = ["z.go", "x.go", "y.go"]
    ordered = order_paths_by_presence(tmp_path, paths)
    assert paths == ["z.go", "x.go", "y.go"]
    assert sorted(ordered) == sorted(paths)
    assert ordered[0] == "x.go"


def test_order_all_missing_is_alphabetical(tmp_path):
    assert order_paths_by_presence(tmp_path, ["c.go", "a.go", "b.go"]) == ["a.go", "b.go", "c.go"]