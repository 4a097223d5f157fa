from __future__ import annotations

import random

import pytest

from contextor.config import FileRecord, TreeLine
from contextor.output_construction import (
    TreeNode,
    build_tree,
    format_file_contents,
    format_project_summary,
    preview,
    render,
)


def _recs(*paths: str) -> list[FileRecord]:
    return [FileRecord(path=p, content="x") for p in paths]


def _tuples(lines: list[TreeLine]) -> list[tuple[str, str]]:
    return [line.as_tuple() for line in lines]


@pytest.mark.unit
def test_build_tree_sorts_top_level_directories_and_files() -> None:
    files = [
        FileRecord(path="src/main.x", content="fn main() {}"),
        FileRecord(path="src/app.x", content="pub struct App {}"),
        FileRecord(path="assets/logo.bin", content=None, is_binary=True),
    ]

    assert _tuples(build_tree(files)) == [
        ("├── assets", "assets"),
        ("│   └── logo.bin", "assets/logo.bin"),
        ("└── src", "src"),
        ("    ├── app.x", "src/app.x"),
        ("    └── main.x", "src/main.x"),
    ]


@pytest.mark.unit
def test_build_tree_single_root_file_has_no_prefix() -> None:
    assert _tuples(build_tree(_recs("notes.txt"))) == [("└── notes.txt", "notes.txt")]


@pytest.mark.unit
def test_build_tree_empty_input_yields_no_lines() -> None:
    assert build_tree([]) == []


@pytest.mark.unit
def test_build_tree_deeply_nested_directories() -> None:
    assert _tuples(build_tree(_recs("src/utils/math/helpers.x"))) == [
        ("└── src", "src"),
        ("    └── utils", "src/utils"),
        ("        └── math", "src/utils/math"),
        ("            └── helpers.x", "src/utils/math/helpers.x"),
    ]


@pytest.mark.unit
def test_build_tree_lists_subdirectories_before_files() -> None:
    lines = build_tree(_recs("pkg/z.py", "pkg/sub/a.py", "pkg/a.py"))

    assert _tuples(lines) == [
        ("└── pkg", "pkg"),
        ("    ├── sub", "pkg/sub"),
        ("    │   └── a.py", "pkg/sub/a.py"),
        ("    ├── a.py", "pkg/a.py"),
        ("    └── z.py", "pkg/z.py"),
    ]


@pytest.mark.unit
def test_build_tree_last_directory_is_last_only_without_following_files() -> None:
    lines = build_tree(_recs("pkg/sub/a.py", "pkg/other/b.py"))

    assert _tuples(lines) == [
        ("└── pkg", "pkg"),
        ("    ├── other", "pkg/other"),
        ("    │   └── b.py", "pkg/other/b.py"),
        ("    └── sub", "pkg/sub"),
        ("        └── a.py", "pkg/sub/a.py"),
    ]


@pytest.mark.unit
def test_build_tree_root_files_come_before_top_level_directories() -> None:
    lines = build_tree(_recs("src/main.py", "b.txt", "a.txt"))

    assert _tuples(lines) == [
        ("├── a.txt", "a.txt"),
        ("└── b.txt", "b.txt"),
        ("└── src", "src"),
        ("    └── main.py", "src/main.py"),
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("paths", "dirs"),
    [
        (["a.txt"], 0),
        (["src/a.py", "src/b.py"], 1),
        (["src/x/y/z.py", "src/x/w.py", "docs/index.md", "README"], 4),
        (["a/b/c/d/e.txt", "a/b/f.txt", "g/h.txt"], 5),
    ],
)
def test_build_tree_line_count_is_directories_plus_files(paths: list[str], dirs: int) -> None:
    assert len(build_tree(_recs(*paths))) == dirs + len(paths)


@pytest.mark.unit
def test_build_tree_does_not_depend_on_input_order() -> None:
    paths = ["src/x/y/z.py", "src/x/w.py", "docs/index.md", "README", "src/a.py", "LICENSE"]
    shuffled = paths[:]
    random.Random(7).shuffle(shuffled)

    assert build_tree(_recs(*paths)) == build_tree(_recs(*shuffled))


@pytest.mark.unit
def test_tree_node_insert_builds_owned_children() -> None:
    node = TreeNode()
    node.insert(["a", "b", "c.txt"])
    node.insert(["a", "d.txt"])
    node.insert([])

    assert set(node.children) == {"a"}
    assert node.children["a"].files == {"d.txt"}
    assert node.children["a"].children["b"].files == {"c.txt"}


@pytest.mark.unit
def test_format_file_contents_uses_placeholders() -> None:
    files = [
        FileRecord(path="src/main.x", content="fn main() {}"),
        FileRecord(path="assets/logo.png", content=None, is_binary=True),
        FileRecord(path="README.md", content=None),
        FileRecord(path="empty.txt", content=""),
        FileRecord(path="large.txt", content="[File size > 1.0MB (max: 1.0MB)]"),
    ]

    assert format_file_contents(files) == {
        "assets/logo.png": "assets/logo.png:\n[Binary file]",
        "README.md": "README.md:\n[Empty file]",
        "empty.txt": "empty.txt:\n[Empty file]",
        "large.txt": "large.txt:\n[File size > 1.0MB (max: 1.0MB)]",
        "src/main.x": "src/main.x:\nfn main() {}",
    }


@pytest.mark.unit
def test_format_file_contents_is_order_independent() -> None:
    files = _recs("b/x.py", "a.py", "c/d/e.py")

    assert format_file_contents(files) == format_file_contents(list(reversed(files)))
    assert format_file_contents(files) == format_file_contents(sorted(files, key=lambda r: r.path))


@pytest.mark.unit
def test_format_project_summary_places_blank_lines() -> None:
    tree = [
        TreeLine(display="├── assets", path="assets"),
        TreeLine(display="│   └── logo.png", path="assets/logo.png"),
        TreeLine(display="└── src", path="src"),
        TreeLine(display="    ├── app.x", path="src/app.x"),
        TreeLine(display="    └── main.x", path="src/main.x"),
    ]
    contents = {
        "src/main.x": "src/main.x:\nfn main() {}",
        "assets/logo.png": "assets/logo.png:\n[Binary file]",
        "src/app.x": "src/app.x:\npub struct App {}",
    }

    expected = (
        "├── assets\n"
        "│   └── logo.png\n"
        "└── src\n"
        "    ├── app.x\n"
        "    └── main.x\n"
        "\n"
        "assets/logo.png:\n[Binary file]\n\n"
        "src/app.x:\npub struct App {}\n\n"
        "src/main.x:\nfn main() {}\n\n"
    )

    assert format_project_summary(tree, contents) == expected


@pytest.mark.unit
def test_render_empty_record_set_is_a_single_blank_line() -> None:
    assert format_file_contents([]) == {}
    assert render([]) == "\n"


@pytest.mark.unit
def test_render_single_root_file() -> None:
    document = render([FileRecord(path="notes.txt", content="hello")])

    assert document == "└── notes.txt\n\nnotes.txt:\nhello\n\n"


@pytest.mark.unit
def test_preview_keeps_first_lines() -> None:
    document = "\n".join(f"line {i}" for i in range(20))

    assert preview(document) == "\n".join(f"line {i}" for i in range(10))
    assert preview(document, lines=2) == "line 0\nline 1"
    assert preview("", lines=5) == ""
