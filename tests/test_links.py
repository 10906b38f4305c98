from obsidian_mcp.core.link_operations import contains_link, link_targets, rewrite_links, strike_links


def test_link_targets_for_nested_note():
    assert link_targets("Projects/Plan.md") == ["Projects/Plan.md", "Projects/Plan", "Plan"]


def test_link_targets_for_root_note():
    assert link_targets("Plan.md") == ["Plan.md", "Plan"]


class TestContainsLink:
    def test_wikilink_by_name_path_and_alias(self):
        assert contains_link("See [[Plan]]", "Projects/Plan.md")
        assert contains_link("See [[Projects/Plan|the plan]]", "Projects/Plan.md")
        assert contains_link("See [[Plan#Goals]]", "Projects/Plan.md")

    def test_similar_names_do_not_match(self):
        assert not contains_link("See [[Planner]]", "Projects/Plan.md")

    def test_inline_code_is_ignored(self):
        assert not contains_link("Use `[[Plan]]` syntax", "Projects/Plan.md")

    def test_markdown_links(self):
        assert contains_link("[text](Projects/Plan.md)", "Projects/Plan.md")
        assert contains_link("[text](Projects/My%20Plan.md)", "Projects/My Plan.md")
        assert not contains_link("[text](Plan.md)", "Projects/Plan.md")


def test_rewrite_links_keeps_link_form():
    content = (
        "[[Plan]] and [[Projects/Plan|alias]] and "
        "[[Projects/Plan.md#Heading]] and [x](Projects/Plan.md#sec)"
    )
    rewritten, count = rewrite_links(content, "Projects/Plan.md", "Archive/Done.md")
    assert rewritten == (
        "[[Done]] and [[Archive/Done|alias]] and "
        "[[Archive/Done.md#Heading]] and [x](Archive/Done.md#sec)"
    )
    assert count == 4


def test_rewrite_links_without_matches():
    assert rewrite_links("[[Other]]", "Plan.md", "New.md") == ("[[Other]]", 0)


def test_strike_links_is_idempotent():
    struck, count = strike_links("See [[Plan]] and [[Plan|p]]", "Plan.md")
    assert struck == "See ~~[[Plan]]~~ and ~~[[Plan|p]]~~"
    assert count == 2
    assert strike_links(struck, "Plan.md") == (struck, 0)


class TestLinksInCode:
    CONTENT = "Use `[[Plan]]` syntax\n```\n[[Plan]]\n[x](Plan.md)\n```\nSee [[Plan]]\n"

    def test_fenced_block_is_not_a_link(self):
        assert not contains_link("```\n[[Plan]]\n```", "Plan.md")

    def test_rewrite_skips_code(self):
        rewritten, count = rewrite_links(self.CONTENT, "Plan.md", "Other.md")
        assert rewritten == "Use `[[Plan]]` syntax\n```\n[[Plan]]\n[x](Plan.md)\n```\nSee [[Other]]\n"
        assert count == 1

    def test_strike_skips_code(self):
        struck, count = strike_links(self.CONTENT, "Plan.md")
        assert struck == "Use `[[Plan]]` syntax\n```\n[[Plan]]\n[x](Plan.md)\n```\nSee ~~[[Plan]]~~\n"
        assert count == 1


def test_rewrite_leaves_unchanged_bare_names_uncounted():
    content = "see [[Plan]] and [[A/Plan]]"
    rewritten, count = rewrite_links(content, "A/Plan.md", "B/Plan.md")
    assert rewritten == "see [[Plan]] and [[B/Plan]]"
    assert count == 1
    assert rewrite_links("see [[Plan]]", "A/Plan.md", "B/Plan.md") == ("see [[Plan]]", 0)
