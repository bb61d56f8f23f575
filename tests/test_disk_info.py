from maple2.disk_info import DiskInfo, WozVersion


def test_from_path_defaults():
    info = DiskInfo.from_path("disks/game.woz")
    assert info.name is None
    assert info.is_write_protected is True
    assert info.woz_version is WozVersion.UNKNOWN
    assert info.metadata == {}


def test_display_name_prefers_explicit_name():
    info = DiskInfo(path="disks/x.dsk", name="DOS 3.3", metadata={"title": "Other"})
    assert info.display_name() == "DOS 3.3"


def test_display_name_uses_title():
    info = DiskInfo(path="disks/x.woz", metadata={"title": "Karateka"})
    assert info.display_name() == "Karateka"


def test_display_name_falls_back_to_file_name():
    assert DiskInfo.from_path("disks/Frogger.woz").display_name() == "Frogger.woz"


def test_display_name_empty_path():
    assert DiskInfo.from_path("").display_name() == ""


def test_str_without_name():
    assert str(DiskInfo.from_path("a/b.dsk")) == "(no name) b.dsk"


def test_str_with_name():
    assert str(DiskInfo(path="a/b.dsk", name="Aztec")) == "name: Aztec"


def test_side():
    info = DiskInfo(path="a.woz", metadata={"side": "Side A"})
    assert info.side() == "Side A"
    assert DiskInfo.from_path("a.woz").side() is None


def test_metadata_not_shared():
    first = DiskInfo.from_path("a")
    second = DiskInfo.from_path("b")
    first.metadata["title"] = "T"
    assert second.metadata == {}