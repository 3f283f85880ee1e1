import pytest


from fileprompt.console import Console
from fileprompt.ignore import (
    IgnoreRule,
    PatternSet,
    Verdict,
    git_global_excludes_file,
    load_directory_rules,
    load_git_excludes,
)

EXCLUDED = Verdict.EXCLUDED
INCLUDED = Verdict.INCLUDED


def verdict(lines, path, is_dir=False, **kwargs):
    return PatternSet.from_lines(lines, **kwargs).matches(path, is_dir)


def test_no_rules_includes_everything():
    assert PatternSet().matches("anything/at/all.py", False) is INCLUDED


def test_blank_lines_and_comments_are_skipped():
    assert len(PatternSet.from_lines(["# comment", "", "   ", "!", "/"])) == 0


@pytest.mark.parametrize(
    "path, expected",
    [
        ("b.rs", EXCLUDED),
        ("sub/b.rs", EXCLUDED),
        ("deep/er/x.rs", EXCLUDED),
        ("b.rsx", INCLUDED),
        ("a.txt", INCLUDED),
    ],
)
def test_unanchored_pattern_matches_at_any_depth(path, expected):
    assert verdict(["*.rs"], path) is expected


def test_last_match_wins_and_negation_reincludes():
    assert verdict(["*.txt"], "notes.txt") is EXCLUDED
    assert verdict(["*.txt", "!notes.txt"], "notes.txt") is INCLUDED
    assert verdict(["*.txt", "!notes.txt"], "other.txt") is EXCLUDED
    assert verdict(["!notes.txt", "*.txt"], "notes.txt") is EXCLUDED


def test_pattern_followed_by_its_negation_is_included():
    for pattern in ["build", "*.log", "/dist", "docs/*.md"]:
        path = {"build": "build", "*.log": "x/y.log", "/dist": "dist", "docs/*.md": "docs/a.md"}[pattern]
        assert verdict([pattern], path) is EXCLUDED
        assert verdict([pattern, "!" + pattern], path) is INCLUDED


def test_directory_only_pattern():
    assert verdict(["build/"], "build", is_dir=True) is EXCLUDED
    assert verdict(["build/"], "src/build", is_dir=True) is EXCLUDED
    assert verdict(["build/"], "build", is_dir=False) is INCLUDED


def test_leading_slash_anchors_to_root():
    assert verdict(["/build"], "build", is_dir=True) is EXCLUDED
    assert verdict(["/build"], "src/build", is_dir=True) is INCLUDED


def test_inner_slash_anchors_too():
    assert verdict(["docs/*.md"], "docs/a.md") is EXCLUDED
    assert verdict(["docs/*.md"], "x/docs/a.md") is INCLUDED


def test_anchored_pattern_does_not_match_below_its_target():
    # "src/b.py" is judged by its parent directory "src", not by this rule
    assert verdict(["/src"], "src/b.py") is INCLUDED
    assert verdict(["a/*"], "a/b/c.txt") is INCLUDED
    assert verdict(["a/*"], "a/b") is EXCLUDED


def test_double_star():
    assert verdict(["docs/**/*.md"], "docs/a/b/c.md") is EXCLUDED
    assert verdict(["docs/**/*.md"], "docs/c.md") is EXCLUDED
    assert verdict(["logs/**"], "logs/a/b.txt") is EXCLUDED
    assert verdict(["**/cache"], "x/y/cache", is_dir=True) is EXCLUDED


def test_question_mark_and_character_class():
    assert verdict(["file?.txt"], "file1.txt") is EXCLUDED
    assert verdict(["file?.txt"], "file10.txt") is INCLUDED
    assert verdict(["[ab].py"], "a.py") is EXCLUDED
    assert verdict(["[ab].py"], "c.py") is INCLUDED


def test_rules_are_scoped_to_their_base_directory():
    patterns = PatternSet.from_lines(["*.txt"], base="sub")
    assert patterns.matches("a.txt", False) is INCLUDED
    assert patterns.matches("sub/a.txt", False) is EXCLUDED
    assert patterns.matches("sub/x/a.txt", False) is EXCLUDED
    assert patterns.matches("subway/a.txt", False) is INCLUDED


def test_anchored_rule_is_relative_to_its_base():
    patterns = PatternSet.from_lines(["/gen"], base="sub")
    assert patterns.matches("sub/gen", True) is EXCLUDED
    assert patterns.matches("sub/x/gen", True) is INCLUDED
    assert patterns.matches("gen", True) is INCLUDED


def test_extend_returns_new_set():
    base = PatternSet.from_lines(["*.log"])
    extended = base.extend(PatternSet.from_lines(["!keep.log"], base="sub").rules)
    assert len(base) == 1
    assert len(extended) == 2
    assert base.matches("sub/keep.log", False) is EXCLUDED
    assert extended.matches("sub/keep.log", False) is INCLUDED
    assert base.extend([]) is base


def test_files_only_mode_skips_name_rules_for_directories():
    patterns = PatternSet.from_lines(["build", "dist/"])
    assert patterns.matches("build", True) is EXCLUDED
    assert patterns.matches("build", True, files_only=True) is INCLUDED
    assert patterns.matches("build", False, files_only=True) is EXCLUDED
    assert patterns.matches("dist", True, files_only=True) is EXCLUDED
    # file names inside a kept directory are judged on their own
    assert patterns.matches("build/x.txt", False, files_only=True) is INCLUDED


def test_parse_flags():
    rule = IgnoreRule.parse("!/out/", base="pkg")
    assert rule.negated and rule.dir_only and rule.anchored
    assert rule.base == "pkg"
    assert rule.pattern == "!/out/"

    plain = IgnoreRule.parse("*.pyc\n")
    assert not (plain.negated or plain.dir_only or plain.anchored)


def test_malformed_pattern_falls_back_to_literal(capsys):
    # a trailing backslash escapes nothing, which pathspec rejects
    patterns = PatternSet.from_lines(["build\\"], console=Console())

    assert len(patterns) == 1
    assert patterns.matches("build\\", False) is EXCLUDED
    assert patterns.matches("build", False) is INCLUDED
    assert "Invalid ignore pattern" in capsys.readouterr().err


def test_rule_hits_only_the_path_itself():
    rule = IgnoreRule.parse("**/foo")
    assert rule.matches("foo", True)
    assert rule.matches("foo/foo", True)
    assert not rule.matches("foo/y.txt", False)
    assert IgnoreRule.parse("logs/**").matches("logs/a/b.txt", False)


def test_later_negation_of_parent_does_not_reinclude_nested_match():
    patterns = PatternSet.from_lines(["**/foo", "!/foo/"])
    assert patterns.matches("foo", True) is INCLUDED
    assert patterns.matches("foo/foo", True) is EXCLUDED
    assert patterns.matches("foo/y.txt", False) is INCLUDED


def test_load_directory_rules_reads_gitignore_and_ignore(tmp_path):
    (tmp_path / ".gitignore").write_text("*.log\n# note\n\n", encoding="utf-8")
    (tmp_path / ".ignore").write_text("!keep.log\n", encoding="utf-8")

    rules = load_directory_rules(tmp_path, "pkg")

    assert [r.pattern for r in rules] == ["*.log", "!keep.log"]
    assert all(r.base == "pkg" for r in rules)


def test_load_directory_rules_without_files(tmp_path):
    assert load_directory_rules(tmp_path, "") == []


def test_global_excludes_file_follows_xdg_config_home(isolated_git_config):
    assert git_global_excludes_file() is None

    target = isolated_git_config / "git" / "ignore"
    target.parent.mkdir()
    target.write_text("*.log\n", encoding="utf-8")

    assert git_global_excludes_file() == target


def test_load_git_excludes_reads_global_then_repository(tmp_path, isolated_git_config):
    (isolated_git_config / "git").mkdir()
    (isolated_git_config / "git" / "ignore").write_text("*.log\n", encoding="utf-8")
    (tmp_path / ".git" / "info").mkdir(parents=True)
    (tmp_path / ".git" / "info" / "exclude").write_text("# local\n!keep.log\n", encoding="utf-8")

    rules = load_git_excludes(tmp_path)

    assert [r.pattern for r in rules] == ["*.log", "!keep.log"]
    assert all(r.base == "" for r in rules)


def test_load_git_excludes_without_files(tmp_path):
    assert load_git_excludes(tmp_path) == []
