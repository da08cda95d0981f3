from alfredlicense.text_view import ErrorMarkdown, FormatRuleTag, GenerateMarkdown


def test_format_rule_tag():
    assert FormatRuleTag("commercial-use") == "Commercial Use"
    assert FormatRuleTag("liability") == "Liability"


def test_markdown_sections(mit_license):
    body = "Copyright (c) 2024 Jane Doe"
    markdown = GenerateMarkdown(mit_license, body)

    assert markdown.startswith("# MIT License\n")
    assert "**Description**\n\nA short and simple permissive license." in markdown
    assert "🟢 **Permissions**\n\n- Commercial Use\n- Modifications" in markdown
    assert "🔵 **Conditions**\n\n- Include Copyright" in markdown
    assert "🔴 **Limitations**\n\n- Liability\n- Warranty" in markdown
    assert f"```\n{body}\n```" in markdown
    assert markdown.endswith("[View on ChooseALicense.com](https://choosealicense.com/licenses/mit/)")
    assert "Placeholders to fill" not in markdown


def test_markdown_lists_unfilled_placeholders(mit_license):
    markdown = GenerateMarkdown(mit_license, "Copyright (c) 2024 [fullname]")

    assert "**Placeholders to fill**\n\n- `[fullname]`" in markdown


def test_markdown_skips_empty_sections():
    markdown = GenerateMarkdown({"key": "unlicense", "permissions": []}, "Public domain.")

    assert markdown.startswith("# unlicense\n")
    assert "Permissions" not in markdown
    assert "Description" not in markdown
    assert "ChooseALicense" not in markdown


def test_error_markdown():
    assert ErrorMarkdown("No license body provided.") == "# Error\n\nNo license body provided."
