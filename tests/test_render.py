"""Tests for hyperlinking whole diff and log texts."""

from __future__ import annotations

from pathlib import Path

from diff_links.config import WORKDIR_ENTRY_KEY, Config, PathEntry
from diff_links.osc8 import format_osc8_hyperlink
from diff_links.render import hyperlink_lines, hyperlink_text

HASH = "342016d0a69d8361dc17396d9a441704416eb7bb"

LOG_TEXT = "\n".join(
    [
        f"commit {HASH}",
        "Author: Test <test@example.com>",
        "",
        "    change things",
        "",
        "diff --git a/src/app.py b/src/app.py",
        "index 1111111..2222222 100644",
        "--- a/src/app.py",
        "+++ b/src/app.py",
        "@@ -1,3 +10,4 @@ def main():",
        " keep",
        "--- removed line that looks like a header",
        "+++ added line that looks like a header",
        "+added",
        " keep",
        "diff --git a/old.txt b/old.txt",
        "deleted file mode 100644",
        "--- a/old.txt",
        "+++ /dev/null",
        "@@ -1 +0,0 @@",
        "-gone",
        "",
    ]
)


def _config() -> Config:
    return Config(
        hyperlinks=True,
        hyperlinks_commit_link_format="http://x/{commit}",
        hyperlinks_file_link_format="file://{path}:{line}",
        git_config_entries={WORKDIR_ENTRY_KEY: PathEntry(Path("/repo"))},
    )


def test_disabled_hyperlinks_pass_text_through() -> None:
    config = _config()
    config.hyperlinks = False
    assert hyperlink_text(LOG_TEXT, config) is LOG_TEXT
    assert list(hyperlink_lines(["a", "b"], config)) == ["a", "b"]


def test_log_text_links_commit_files_and_hunks() -> None:
    rendered = hyperlink_text(LOG_TEXT, _config()).split("\n")

    assert rendered[0] == "commit " + format_osc8_hyperlink(f"http://x/{HASH}", HASH)
    assert rendered[7] == "--- " + format_osc8_hyperlink(
        "file:///repo/src/app.py:", "a/src/app.py"
    )
    assert rendered[8] == "+++ " + format_osc8_hyperlink(
        "file:///repo/src/app.py:", "b/src/app.py"
    )
    assert rendered[9] == format_osc8_hyperlink(
        "file:///repo/src/app.py:10", "@@ -1,3 +10,4 @@"
    ) + " def main():"


def test_hunk_body_lines_are_never_treated_as_headers() -> None:
    rendered = hyperlink_text(LOG_TEXT, _config()).split("\n")
    assert rendered[11] == "--- removed line that looks like a header"
    assert rendered[12] == "+++ added line that looks like a header"
    assert rendered[13] == "+added"


def test_deleted_file_links_old_side_only() -> None:
    rendered = hyperlink_text(LOG_TEXT, _config()).split("\n")
    assert rendered[17] == "--- " + format_osc8_hyperlink("file:///repo/old.txt:", "a/old.txt")
    assert rendered[18] == "+++ /dev/null"
    assert rendered[19] == "@@ -1 +0,0 @@"


def test_trailing_newline_is_preserved() -> None:
    assert hyperlink_text("plain\n", _config()) == "plain\n"
    assert hyperlink_text("plain", _config()) == "plain"


def test_file_headers_untouched_without_workdir() -> None:
    config = _config()
    config.git_config_entries = {}
    rendered = hyperlink_text(LOG_TEXT, config).split("\n")
    assert rendered[0].startswith("commit \x1b]8;;")
    assert rendered[7:10] == LOG_TEXT.split("\n")[7:10]


def test_header_after_short_hunk_is_still_recognized() -> None:
    lines = [
        "--- a/f.txt",
        "+++ b/f.txt",
        "@@ -1,5 +1,5 @@",
        " only one line",
        f"commit {HASH}",
    ]
    rendered = list(hyperlink_lines(lines, _config()))
    assert rendered[3] == " only one line"
    assert rendered[4] == "commit " + format_osc8_hyperlink(f"http://x/{HASH}", HASH)


def test_tab_trailer_on_file_header_is_kept() -> None:
    lines = ["--- a/f.txt\t2024-01-01 00:00:00"]
    rendered = list(hyperlink_lines(lines, _config()))
    assert rendered == [
        "--- " + format_osc8_hyperlink("file:///repo/f.txt:", "a/f.txt") + "\t2024-01-01 00:00:00"
    ]


def test_form_feed_inside_hunk_body_does_not_split_the_line() -> None:
    text = "--- a/f.c\n+++ b/f.c\n@@ -1,3 +1,3 @@\n a\x0cb\n--- x\n+++ y\n"
    rendered = hyperlink_text(text, _config()).split("\n")
    assert len(rendered) == 7
    assert rendered[3] == " a\x0cb"
    assert rendered[4] == "--- x"
    assert rendered[5] == "+++ y"


def test_carriage_returns_are_preserved() -> None:
    text = "--- a/f.txt\r\n+++ b/f.txt\r\n@@ -1 +1 @@\r\n-old\r\n+new\r\n"
    rendered = hyperlink_text(text, _config())
    assert rendered.endswith("-old\r\n+new\r\n")
    assert "+++ " + format_osc8_hyperlink("file:///repo/f.txt:", "b/f.txt") + "\r\n" in rendered
