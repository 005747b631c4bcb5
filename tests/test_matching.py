import pytest

from pathdigest.matching import matches, normalize_path, should_descend


@pytest.mark.parametrize(
    "path, is_dir, patterns, expected",
    [
        # name patterns
        ("file.txt", False, ["file.txt"], True),
        ("other.txt", False, ["file.txt"], False),
        ("doc.txt", False, ["*.txt"], True),
        ("doc.md", False, ["*.txt"], False),
        ("src/file.go", False, ["src/*.go"], True),
        ("lib/file.go", False, ["src/*.go"], False),
        ("main.go", False, ["main.*"], True),
        ("image.jpg", False, ["*.png", "*.jpg", "*.gif"], True),
        ("image.bmp", False, ["*.png", "*.jpg", "*.gif"], False),
        ("src/config.json", False, ["config.json"], True),
        # directory patterns
        ("src", True, ["src/"], True),
        ("src/", True, ["src/"], True),
        ("docs", True, ["src/"], False),
        ("node_modules/package/file.js", False, ["node_modules/"], True),
        ("vendor/lib/sublib", True, ["vendor/"], True),
        ("main.go", False, ["src/"], False),
        ("a/b/c/d.txt", False, ["a/b/"], True),
        ("a/other.txt", False, ["a/b/"], False),
        ("build", True, ["build/"], True),
        ("dist/bundle.js", False, ["dist/"], True),
        # leading ./
        ("./file.txt", False, ["*.txt"], True),
        ("./src/file.go", False, ["src/*.go"], True),
        ("./src/", True, ["src/"], True),
        # same name as file or dir
        ("config", False, ["config"], True),
        ("config", True, ["config"], True),
        ("data", False, ["data/"], False),
        ("data/", True, ["data"], True),
        # empty inputs
        ("file.txt", False, [], False),
        ("", False, [], False),
        ("", False, ["*.txt"], False),
    ],
)
def test_matches(path, is_dir, patterns, expected):
    assert matches(path, is_dir, patterns) is expected


@pytest.mark.parametrize(
    "path, expected",
    [
        ("a", True),  # ancestor
        ("a/b", True),  # the directory itself
        ("a/b/c", True),  # descendant
        ("a/bc", False),  # shares a prefix but is a sibling
        ("b", False),
        ("x/a/b", False),
    ],
)
def test_directory_pattern_matches_ancestors_and_descendants(path, expected):
    assert matches(path, True, ["a/b/"]) is expected


def test_wildcards_do_not_cross_separators():
    assert not matches("src/a/b.go", False, ["src/*.go"])
    assert matches("src/a/b.go", False, ["src/*/*.go"])
    assert matches("deep/down/x.go", False, ["*.go"])


def test_backslashes_are_normalised():
    assert normalize_path("src\\pkg\\main.go") == "src/pkg/main.go"
    assert matches("src\\main.go", False, ["src/*.go"])
    assert matches("node_modules\\x\\y.js", False, ["node_modules/"])


def test_root_only_patterns():
    for pattern in ("/", "./"):
        assert matches(".", True, [pattern])
        assert not matches("src", True, [pattern])
        assert not matches("main.go", False, [pattern])


def test_leading_dot_slash_in_pattern():
    assert matches("src/app", True, ["./src/"])
    assert matches("src/app/x.py", False, ["./src/"])


def test_character_classes():
    assert matches("file1.txt", False, ["file[0-9].txt"])
    assert not matches("fileA.txt", False, ["file[0-9].txt"])
    assert matches("a.c", False, ["?.c"])


def test_terraform_prefix_glob():
    assert matches("infra/terraform.tfstate.backup", False, ["terraform.tfstate*"])


@pytest.mark.parametrize("path", ["", "src", "a/b/c", "node_modules"])
def test_should_descend_with_any_glob(path):
    assert should_descend(path, ["docs/", "*.go"])


@pytest.mark.parametrize(
    "path, expected",
    [
        ("src", True),
        ("src/api", True),
        ("src/api/v1", True),
        ("src/other", False),
        ("docs", False),
    ],
)
def test_should_descend_directory_patterns(path, expected):
    assert should_descend(path, ["src/api/"]) is expected


def test_should_descend_without_patterns():
    assert not should_descend("src", [])


@pytest.mark.parametrize(
    "path, expected",
    [
        ("fileA.txt", True),
        ("file1.txt", False),
        ("file^.txt", False),
    ],
)
def test_caret_negates_character_class(path, expected):
    assert matches(path, False, ["file[^0-9].txt"]) is expected


def test_bang_negation_still_works():
    assert matches("src/fileA.go", False, ["src/file[!0-9].go"])
    assert not matches("src/file7.go", False, ["src/file[!0-9].go"])
