"""Tests for glnote.frontmatter."""

from glnote.frontmatter import add_issue_url, has_frontmatter_block

URL = "https://gitlab.example/p/-/issues/7"
OTHER_URL = "https://gitlab.example/p/-/issues/9"


class TestNoBlock:
    def test_synthesizes_block_before_body(self) -> None:
        body = "# Title\n\nSome text\n"
        result = add_issue_url(body, URL)
        assert result == f'---\ngitlab_issue_url: "{URL}"\n---\n{body}'

    def test_empty_document(self) -> None:
        assert add_issue_url("", URL) == f'---\ngitlab_issue_url: "{URL}"\n---\n'

    def test_horizontal_rule_is_not_a_block(self) -> None:
        body = "Intro\n---\nMore"
        assert add_issue_url(body, URL).endswith(f"---\n{body}")


class TestExistingBlock:
    def test_appends_key_before_closing_marker(self) -> None:
        doc = "---\ntitle: Plan\ntags: [a, b]\n---\nBody\n"
        assert add_issue_url(doc, URL) == f'---\ntitle: Plan\ntags: [a, b]\ngitlab_issue_url: "{URL}"\n---\nBody\n'

    def test_empty_block(self) -> None:
        assert add_issue_url("---\n---\nBody", URL) == f'---\ngitlab_issue_url: "{URL}"\n---\nBody'

    def test_replaces_existing_value_in_place(self) -> None:
        doc = f'---\ntitle: Plan\ngitlab_issue_url: "{OTHER_URL}"\nstatus: open\n---\nBody'
        assert add_issue_url(doc, URL) == f'---\ntitle: Plan\ngitlab_issue_url: "{URL}"\nstatus: open\n---\nBody'

    def test_replaces_unquoted_value(self) -> None:
        doc = f"---\ngitlab_issue_url: {OTHER_URL}\n---\n"
        assert add_issue_url(doc, URL) == f'---\ngitlab_issue_url: "{URL}"\n---\n'

    def test_similar_key_not_treated_as_issue_key(self) -> None:
        doc = f"---\nold_gitlab_issue_url: {OTHER_URL}\n---\n"
        assert add_issue_url(doc, URL) == f'---\nold_gitlab_issue_url: {OTHER_URL}\ngitlab_issue_url: "{URL}"\n---\n'

    def test_dashes_inside_values_do_not_close_block(self) -> None:
        doc = "---\nnote: a---b\n---\nBody"
        assert add_issue_url(doc, URL) == f'---\nnote: a---b\ngitlab_issue_url: "{URL}"\n---\nBody'

    def test_later_blocks_untouched(self) -> None:
        doc = "---\na: 1\n---\nBody\n---\nb: 2\n---\n"
        result = add_issue_url(doc, URL)
        assert result.endswith("Body\n---\nb: 2\n---\n")
        assert result.count("gitlab_issue_url") == 1


class TestProperties:
    def test_idempotent(self) -> None:
        for doc in ("Body only\n", "---\na: 1\n---\nBody", f'---\ngitlab_issue_url: "{OTHER_URL}"\n---\n'):
            once = add_issue_url(doc, URL)
            assert add_issue_url(once, URL) == once

    def test_preserves_other_lines_and_body(self) -> None:
        keys = ["title: Weekly sync", "tags:", "  - meeting", "  - team", "date: 2024-01-05", 'quote: "a: b"']
        body = "\n# Agenda\n\n- [[Roadmap]] #planning\n"
        doc = "---\n" + "\n".join(keys) + f'\ngitlab_issue_url: "{OTHER_URL}"\n---' + body

        result = add_issue_url(doc, URL)

        block, _, rest = result[4:].partition("\n---")
        lines = block.split("\n")
        assert [line for line in lines if not line.startswith("gitlab_issue_url")] == keys
        assert rest == body

    def test_output_differs_from_input_for_new_url(self) -> None:
        for doc in ("", "Body", "---\na: 1\n---\n", f'---\ngitlab_issue_url: "{OTHER_URL}"\n---\n'):
            assert add_issue_url(doc, URL) != doc


class TestHasFrontmatterBlock:
    def test_detects_block(self) -> None:
        assert has_frontmatter_block("---\na: 1\n---\nBody")

    def test_no_block(self) -> None:
        assert not has_frontmatter_block("Body\n---\n")

    def test_unclosed(self) -> None:
        assert not has_frontmatter_block("---\na: 1\n")
