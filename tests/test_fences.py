from appforge.core.fences import extract_code_fence, split_code_fence, strip_code_fences


def test_untagged_fence():
    assert extract_code_fence("look:\n```\nconst a = 1;\n```") == "const a = 1;"


def test_known_language_hints():
    for tag in ("tsx", "jsx", "javascript", "react", "typescript"):
        assert extract_code_fence(f"```{tag}\nx\n```") == "x"


def test_unknown_tag_is_skipped():
    content = "```json\n{\"a\": 1}\n```\nthen\n```tsx\n<App />\n```"
    assert extract_code_fence(content) == "<App />"
    assert extract_code_fence("```python\nprint(1)\n```") is None


def test_no_fence():
    assert extract_code_fence("nothing fenced") is None
    assert split_code_fence("nothing fenced") is None
    assert extract_code_fence(None) is None


def test_split_returns_code_and_surrounding_text():
    code, outside = split_code_fence("Intro\n```tsx\n<A/>\n```\nOutro")
    assert code == "<A/>"
    assert outside == "Intro\n\nOutro"


def test_strip_code_fences_for_display():
    content = "Here you go:\n\n```tsx\n<A/>\n```\n\n\n\nAnd a note.\n```css\nb{}\n```"
    assert strip_code_fences(content) == "Here you go:\n\nAnd a note."
    assert strip_code_fences("") == ""
    assert strip_code_fences("plain") == "plain"
