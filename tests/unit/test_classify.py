"""Tests for dependency specifier classification."""

import pytest

from pkgshape.classify import (
    GitHubShorthand,
    GitRemote,
    LinkPath,
    LocalPath,
    NpmAlias,
    Protocol,
    SemverRange,
    Tag,
    TarballUrl,
    Workspace,
    classify,
    classify_dependencies,
)
from pkgshape.errors import EmptySpecifier, ErrorKind


class TestClassifierPrecedence:
    """Documented examples of which rule wins."""

    def test_caret_range(self):
        assert classify("^1.2.3") == SemverRange("^1.2.3")

    def test_workspace_star(self):
        assert classify("workspace:*") == Workspace("*")

    def test_workspace_caret_carries_suffix(self):
        assert classify("workspace:^") == Workspace("^")
        assert classify("workspace:~1.2.0") == Workspace("~1.2.0")

    def test_npm_alias_with_nested_range(self):
        assert classify("npm:lodash@^4.0.0") == NpmAlias("lodash", SemverRange("^4.0.0"))

    def test_github_shorthand_with_ref(self):
        assert classify("user/repo#main") == GitHubShorthand("user", "repo", "main")

    def test_file_protocol(self):
        assert classify("file:../local-pkg") == LocalPath("../local-pkg")

    def test_dist_tag(self):
        assert classify("latest") == Tag("latest")

    def test_git_https_with_ref(self):
        assert classify("git+https://example.com/a.git#v2") == GitRemote("https", "https://example.com/a.git", "v2")


class TestProtocolPrefixes:
    """Rule 1: explicit protocol prefixes."""

    def test_link(self):
        assert classify("link:../sibling") == LinkPath("../sibling")

    def test_git_plain(self):
        assert classify("git://github.com/npm/cli.git") == GitRemote("git", "git://github.com/npm/cli.git", None)

    def test_git_ssh(self):
        result = classify("git+ssh://git@github.com:npm/cli.git#v1.0.27")
        assert result == GitRemote("ssh", "ssh://git@github.com:npm/cli.git", "v1.0.27")

    def test_git_http_and_file(self):
        assert classify("git+http://example.com/repo.git").scheme == "http"
        assert classify("git+file:///srv/repo.git") == GitRemote("file", "file:///srv/repo.git", None)

    def test_github_prefix(self):
        assert classify("github:acme/tool#semver:^1.0") == GitHubShorthand("acme", "tool", "semver:^1.0")

    def test_scoped_alias(self):
        assert classify("npm:@acme/pad@~2.1.0") == NpmAlias("@acme/pad", SemverRange("~2.1.0"))

    def test_alias_without_version_accepts_any(self):
        assert classify("npm:lodash") == NpmAlias("lodash", SemverRange("*"))
        assert classify("npm:@acme/pad") == NpmAlias("@acme/pad", SemverRange("*"))

    @pytest.mark.parametrize("spec", ["npm:", "npm:@acme", "npm:@1.0.0", "npm:@"])
    def test_alias_without_package_name_is_tag(self, spec):
        assert classify(spec) == Tag(spec)

    def test_alias_with_tag(self):
        assert classify("npm:react@next") == NpmAlias("react", Tag("next"))

    def test_alias_does_not_nest(self):
        result = classify("npm:a@npm:b@1.0.0")
        assert isinstance(result, NpmAlias)
        assert result.name == "a"
        assert result.specifier == Tag("npm:b@1.0.0")

    def test_protocol_wins_over_path_shape(self):
        # "file:" would otherwise look like nothing; "workspace:./x" like a path
        assert classify("workspace:./packages/a") == Workspace("./packages/a")


class TestBareUrls:
    """Rule 2: http(s) URLs."""

    def test_tarball(self):
        url = "https://registry.example.com/pkg/-/pkg-1.0.0.tgz"
        assert classify(url) == TarballUrl(url)

    def test_tar_gz_with_query(self):
        url = "http://example.com/archive.tar.gz?token=abc"
        assert classify(url) == TarballUrl(url)

    def test_dot_git_remote(self):
        assert classify("https://example.com/team/repo.git#dev") == GitRemote(
            "https", "https://example.com/team/repo.git", "dev"
        )

    def test_known_vcs_host(self):
        assert classify("https://github.com/acme/tool") == GitRemote("https", "https://github.com/acme/tool", None)

    def test_unknown_url_falls_through_to_tag(self):
        assert classify("https://example.com/some/page") == Tag("https://example.com/some/page")


class TestPaths:
    """Rule 3: filesystem paths."""

    @pytest.mark.parametrize("path", ["./lib", "../lib", "/opt/lib", "~/lib", ".", "..", "C:\\pkgs\\lib", "D:/lib"])
    def test_local_paths(self, path):
        assert classify(path) == LocalPath(path)

    def test_relative_path_is_not_shorthand(self):
        assert classify("./owner/repo") == LocalPath("./owner/repo")


class TestShorthandAndRanges:
    """Rules 4 and 5."""

    def test_shorthand_without_ref(self):
        assert classify("acme/tool") == GitHubShorthand("acme", "tool", None)

    @pytest.mark.parametrize(
        "spec",
        [
            "1.2.3",
            "=1.2.3",
            "v1.2.3",
            "~1.2",
            "~>1.2",
            ">=1.0.0 <2.0.0",
            ">= 1.0.0",
            "1.2.3 - 2.3.4",
            "1.x",
            "1.2.X",
            "*",
            "x",
            "^0.0.1-alpha.1+build.7",
            "^1.2.3 || ^2.0.0",
            "<1.0.0 || >=2.3.1 <2.4.5 || >=2.5.2 <3.0.0",
        ],
    )
    def test_semver_ranges(self, spec):
        assert classify(spec) == SemverRange(spec)

    @pytest.mark.parametrize("spec", ["beta", "next", "1.2.3.4", "^1.2.3-", "01.2.3", "latest-stable"])
    def test_non_ranges_are_tags(self, spec):
        assert classify(spec) == Tag(spec)


class TestTotality:
    """Every non-empty input yields exactly one variant."""

    def test_empty_raises(self):
        with pytest.raises(EmptySpecifier) as exc_info:
            classify("")
        assert exc_info.value.kind == ErrorKind.EMPTY_SPECIFIER

    def test_whitespace_only_raises(self):
        with pytest.raises(EmptySpecifier):
            classify("   ")

    def test_surrounding_whitespace_is_ignored(self):
        assert classify("  ^1.0.0 ") == SemverRange("^1.0.0")

    @pytest.mark.parametrize("spec", ["@", "#", "::", "npm:", "git+", "a/b/c", "\u2603", "workspace:"])
    def test_odd_input_still_classifies(self, spec):
        result = classify(spec)
        assert isinstance(result.protocol, Protocol)

    def test_classify_never_mutates_input(self):
        raw = "npm:lodash@^4.0.0"
        classify(raw)
        assert raw == "npm:lodash@^4.0.0"


class TestVariantStrings:
    """Variants render back to specifier text."""

    def test_round_trip_text(self):
        for raw in ["^1.2.3", "latest", "workspace:*", "link:../x", "acme/tool#main", "npm:lodash@^4.0.0"]:
            assert str(classify(raw)) == raw

    def test_git_remote_restores_prefix(self):
        assert str(classify("git+https://example.com/a.git#v2")) == "git+https://example.com/a.git#v2"
        assert str(classify("git://example.com/a.git")) == "git://example.com/a.git"


class TestClassifyDependencies:
    """Whole dependency maps."""

    def test_keeps_order(self):
        result = classify_dependencies({"b": "^1.0.0", "a": "latest", "c": "file:./c"})
        assert list(result) == ["b", "a", "c"]
        assert result["a"] == Tag("latest")
        assert result["c"].protocol == Protocol.FILE

    def test_empty_specifier_names_dependency(self):
        with pytest.raises(EmptySpecifier) as exc_info:
            classify_dependencies({"ok": "1.0.0", "broken": ""})
        assert exc_info.value.name == "broken"
