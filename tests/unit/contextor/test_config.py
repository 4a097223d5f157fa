import pytest
from pydantic import ValidationError

from contextor.config import FileRecord, TreeLine


@pytest.mark.unit
def test_file_record_parts_split_on_slashes() -> None:
    rec = FileRecord(path="src/utils/math/helpers.x", content="")

    assert rec.parts == ("src", "utils", "math", "helpers.x")


@pytest.mark.unit
def test_file_record_is_immutable_and_hashable() -> None:
    rec = FileRecord(path="a.txt", content="a")

    with pytest.raises(ValidationError):
        rec.content = "b"  # type: ignore[misc]
    assert len({rec, FileRecord(path="a.txt", content="a")}) == 1


@pytest.mark.unit
def test_binary_record_cannot_hold_content() -> None:
    with pytest.raises(ValidationError):
        FileRecord(path="logo.png", content="oops", is_binary=True)


@pytest.mark.unit
def test_tree_line_as_tuple() -> None:
    assert TreeLine(display="└── src", path="src").as_tuple() == ("└── src", "src")
