from pathlib import Path

import pytest

from frontpost.checks import check_collection, check_file, check_text

VALID = '+++\ntitle = "Hello"\ndate = 2020-08-20\n+++\n\nSome words.\n'


def codes(issues):
    return [issue.code for issue in issues]


def test_valid_document_has_no_issues():
    assert check_text(VALID) == []


def test_quoted_date_is_accepted():
    assert check_text('+++\ntitle = "Hello"\ndate = "2020-08-20"\n+++\nBody\n') == []


def test_yaml_frontmatter_is_checked_too():
    assert check_text("---\ntitle: Hello\ndate: 2020-08-20\n---\nBody\n") == []


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Hello\n", ["missing-open-marker"]),
        ('+++\ntitle = "Hello"\n', ["missing-close-marker"]),
        ("+++\ntitle = \n+++\nBody\n", ["bad-header"]),
        ('+++\ntitle = "Hello"\n+++\nBody\n', ["missing-key"]),
        ('+++\ntitle = "A"\ntitle = "B"\ndate = 2020-01-01\n+++\nBody\n', ["duplicate-key"]),
        ('+++\ntitle = "A"\ndate = 2020-01-01\ndraft = true\n+++\nBody\n', ["unexpected-key"]),
        ('+++\ntitle = "  "\ndate = 2020-01-01\n+++\nBody\n', ["empty-title"]),
        ("+++\ntitle = 3\ndate = 2020-01-01\n+++\nBody\n", ["empty-title"]),
        ('+++\ntitle = "A"\ndate = "2020-13-01"\n+++\nBody\n', ["bad-date"]),
        ('+++\ntitle = "A"\ndate = 2020-01-01T10:00:00\n+++\nBody\n', ["bad-date"]),
        ('+++\ntitle = "A"\ndate = 2020-01-01\n+++\n\n  \n', ["empty-body"]),
    ],
)
def test_structural_issues(text, expected):
    assert codes(check_text(text)) == expected


def test_duplicate_yaml_keys_are_reported():
    text = "---\ntitle: A\ntitle: B\ndate: 2020-01-01\n---\nBody\n"
    assert codes(check_text(text)) == ["duplicate-key"]


def test_issue_string_names_the_file():
    (issue,) = check_text("Hello\n", name="post.md")
    assert str(issue).startswith("post.md: [missing-open-marker]")


def test_filename_date_must_match(tmp_path: Path):
    good = tmp_path / "20-08-20-hello.md"
    good.write_text(VALID)
    bad = tmp_path / "20-08-21-hello.md"
    bad.write_text(VALID)
    undated = tmp_path / "hello.md"
    undated.write_text(VALID)

    assert check_file(good) == []
    assert codes(check_file(bad)) == ["filename-date"]
    assert check_file(undated) == []


def test_filename_date_format_is_configurable(tmp_path: Path):
    long_form = tmp_path / "2020-08-20-hello.md"
    long_form.write_text(VALID)

    assert check_file(long_form, date_format="%Y-%m-%d") == []
    assert codes(check_file(long_form)) == ["filename-date"]


def test_collection_reports_shared_dates(tmp_path: Path):
    (tmp_path / "a.md").write_text(VALID)
    (tmp_path / "b.md").write_text(VALID.replace("Hello", "Other"))
    (tmp_path / "c.md").write_text(VALID.replace("2020-08-20", "2020-08-21"))

    issues = check_collection(tmp_path)
    assert codes(issues) == ["duplicate-date", "duplicate-date"]
    assert {Path(issue.path).name for issue in issues} == {"a.md", "b.md"}


def test_collection_accepts_a_single_file(tmp_path: Path):
    post = tmp_path / "post.md"
    post.write_text("no header")
    assert codes(check_collection(post)) == ["missing-open-marker"]


def test_invalid_utf8_is_reported_not_raised(tmp_path: Path):
    broken = tmp_path / "20-08-20-broken.md"
    broken.write_bytes(b'+++\ntitle = "Hello"\ndate = 2020-08-20\n+++\n\n\xff\xfe\n')
    (tmp_path / "20-08-21-fine.md").write_text(VALID.replace("2020-08-20", "2020-08-21"))

    assert codes(check_file(broken)) == ["bad-encoding"]
    issues = check_collection(tmp_path)
    assert [(Path(issue.path).name, issue.code) for issue in issues] == [("20-08-20-broken.md", "bad-encoding")]


def test_collection_scan_matches_post_collection(tmp_path: Path):
    (tmp_path / "a.markdown").write_text("no header")
    nested = tmp_path / "drafts"
    nested.mkdir()
    (nested / "b.md").write_text("no header")

    issues = check_collection(tmp_path)
    assert [Path(issue.path).name for issue in issues] == ["a.markdown"]


def test_multiline_string_lines_are_not_keys():
    text = '+++\ntitle = "A"\ndate = 2020-01-01\nsummary = """\ntitle = not a key\n"""\n+++\nBody\n'
    assert codes(check_text(text)) == ["unexpected-key"]
