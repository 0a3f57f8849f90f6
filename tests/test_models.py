from datetime import date

import pytest
from pydantic import ValidationError

from frontpost import Post
from frontpost.utils import slugify

BODY = """Intro paragraph.

## Choosing Technology

```rust
// # not a heading
fn main() {}
```

### Wrapping up ###

~~~
plain fence
~~~
"""


def test_post_accepts_iso_date_strings():
    post = Post(title="Understanding Serde", date="2020-09-09")
    assert post.date == date(2020, 9, 9)
    assert post.body == ""


def test_post_title_is_stripped_and_required():
    assert Post(title="  Hi  ", date=date(2020, 1, 1)).title == "Hi"
    with pytest.raises(ValidationError):
        Post(title="   ", date=date(2020, 1, 1))


def test_post_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        Post(title="Hi", date=date(2020, 1, 1), draft=True)


def test_post_rejects_invalid_dates():
    with pytest.raises(ValidationError):
        Post(title="Hi", date="2020-02-30")


def test_headings_skip_fenced_code():
    post = Post(title="Hi", date=date(2020, 1, 1), body=BODY)
    assert post.headings() == ["Choosing Technology", "Wrapping up"]


def test_code_blocks_carry_language():
    post = Post(title="Hi", date=date(2020, 1, 1), body=BODY)
    blocks = post.code_blocks()
    assert blocks == [
        ("rust", "// # not a heading\nfn main() {}"),
        ("", "plain fence"),
    ]


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Let's start a blog!", "lets-start-a-blog"),
        ("Understanding Serde", "understanding-serde"),
        ("  --  ", "item"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_post_slug():
    assert Post(title="Let's start a blog!", date=date(2020, 8, 20)).slug == "lets-start-a-blog"


def test_setext_headings_are_found():
    post = Post(title="Hi", date=date(2020, 1, 1), body="Choosing Technology\n===================\n\nMore\n----\n")
    assert post.headings() == ["Choosing Technology", "More"]


def test_indented_fence_hides_its_contents():
    post = Post(title="Hi", date=date(2020, 1, 1), body="Intro\n\n  ```\n# not a heading\n  ```\n")
    assert post.headings() == []
    assert post.code_blocks() == [("", "# not a heading")]


def test_fence_language_is_first_word_of_info():
    post = Post(title="Hi", date=date(2020, 1, 1), body="```toml title=\"Cargo.toml\"\n[package]\n```\n")
    assert post.code_blocks() == [("toml", "[package]")]
