import os

from sparkium.file_probe import FileProbe, default_probe, find_assets_file


def test_find_file_returns_first_match(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (second / "a.txt").write_text("x")
    (first / "a.txt").write_text("y")
    probe = FileProbe([str(first) + os.sep, str(second) + os.sep])
    assert probe.find_file("a.txt") == str(first) + os.sep + "a.txt"


def test_find_file_skips_missing_prefix(tmp_path):
    (tmp_path / "b.txt").write_text("x")
    probe = FileProbe(["/nonexistent_dir_for_probe/"])
    probe.add_search_path(str(tmp_path) + os.sep)
    assert probe.find_file("b.txt") == str(tmp_path) + os.sep + "b.txt"


def test_find_file_ignores_directories(tmp_path):
    (tmp_path / "sub").mkdir()
    probe = FileProbe([str(tmp_path) + os.sep])
    assert probe.find_file("sub") is None


def test_find_file_missing_returns_none(tmp_path):
    probe = FileProbe([str(tmp_path) + os.sep])
    assert probe.find_file("missing.obj") is None


def test_add_search_path_appends_in_order():
    probe = FileProbe()
    probe.add_search_path("a/")
    probe.add_search_path("b/")
    assert probe.search_paths == ("a/", "b/")


def test_str_lists_paths():
    probe = FileProbe(["a/", "b/"])
    assert str(probe) == "Search paths:\n-------------\na/\nb/\n"


def test_default_probe_is_shared_and_starts_with_empty_prefix():
    assert default_probe() is default_probe()
    assert default_probe().search_paths[0] == ""
    assert default_probe().search_paths[-3:] == ("./", "../", "../../")


def test_find_assets_file_accepts_absolute_path(tmp_path):
    target = tmp_path / "scene.xml"
    target.write_text("<scene/>")
    assert find_assets_file(str(target)) == str(target)