from postsite.links import rewrite_links
from postsite.render import markdown_to_html


def test_internal_links_pass_through():
    text = "See [the other post](/posts/other.html) for more."
    assert rewrite_links(text) == text


def test_external_link_opens_new_tab():
    result = rewrite_links("Hi [Google](https://google.com).")
    assert result == 'Hi <a href="https://google.com" target="_blank" rel="noopener noreferrer">Google</a>.'


def test_relative_links_are_external_to_posts():
    result = rewrite_links("[About](/about.html)")
    assert 'target="_blank"' in result


def test_mixed_links():
    text = "[a](/posts/a.html) and [b](https://b.example)"
    result = rewrite_links(text)
    assert result.startswith("[a](/posts/a.html) and ")
    assert result.endswith('<a href="https://b.example" target="_blank" rel="noopener noreferrer">b</a>')


def test_rewriting_twice_does_not_double_annotate():
    text = "[a](/posts/a.html), [b](https://b.example) and [c](http://c.example/x)"
    once = rewrite_links(text)
    twice = rewrite_links(once)
    assert twice == once
    assert once.count('target="_blank"') == 2


def test_images_are_untouched():
    text = "![diagram](https://img.example/d.png)"
    assert rewrite_links(text) == text


def test_href_is_attribute_escaped():
    result = rewrite_links('[q](https://x.example/?a=1&b="2")')
    assert 'href="https://x.example/?a=1&amp;b=&quot;2&quot;"' in result


def test_text_without_links_is_unchanged():
    text = "Brackets [alone] and (parens) stay."
    assert rewrite_links(text) == text


def test_inline_code_spans_are_untouched():
    text = "Use `[x](https://e.com)` to link, or [y](https://y.example)."
    result = rewrite_links(text)
    assert result.startswith("Use `[x](https://e.com)` to link, or <a ")
    assert result.count('target="_blank"') == 1


def test_double_backtick_code_span_is_untouched():
    text = "``[x](https://e.com) with a ` inside``"
    assert rewrite_links(text) == text


def test_fenced_code_blocks_are_untouched():
    text = "```markdown\n[x](https://e.com)\n```\nafter [y](https://y.example)\n"
    result = rewrite_links(text)
    assert result.startswith("```markdown\n[x](https://e.com)\n```\n")
    assert 'after <a href="https://y.example"' in result


def test_fence_only_closes_on_matching_marker():
    text = "~~~\n```\n[x](https://e.com)\n~~~\n[y](https://y.example)"
    result = rewrite_links(text)
    assert "[x](https://e.com)" in result
    assert '<a href="https://y.example"' in result


def test_code_survives_markdown_conversion():
    html = markdown_to_html(rewrite_links("Use `[x](https://e.com)` here."))
    assert "<code>[x](https://e.com)</code>" in html
    assert "&lt;a" not in html


def test_linked_image_keeps_image_inside_link():
    text = "[![badge](https://img.example/b.svg)](https://ci.example)"
    result = rewrite_links(text)
    assert result == (
        '<a href="https://ci.example" target="_blank" rel="noopener noreferrer">'
        "![badge](https://img.example/b.svg)</a>"
    )
    html = markdown_to_html(result)
    assert 'href="https://ci.example"' in html
    assert 'src="https://img.example/b.svg"' in html
    assert 'alt="badge"' in html


def test_link_title_becomes_attribute():
    result = rewrite_links('[t](https://e.com "Tom & Jerry")')
    assert result.startswith('<a href="https://e.com" title="Tom &amp; Jerry" target="_blank"')
    result = rewrite_links("[t](https://e.com 'Title')")
    assert result == '<a href="https://e.com" title="Title" target="_blank" rel="noopener noreferrer">t</a>'


def test_internal_link_with_title_passes_through():
    text = '[next](/posts/next.html "Next post")'
    assert rewrite_links(text) == text
