from alfredlicense.placeholders import FindPlaceholders

RULE_SECTIONS: list[tuple[str, str]] = [
    ("permissions", "🟢 **Permissions**"),
    ("conditions", "🔵 **Conditions**"),
    ("limitations", "🔴 **Limitations**"),
]


def FormatRuleTag(tag: str) -> str:
    """Turns a rule tag like "commercial-use" into "Commercial Use"."""

    return " ".join(word[:1].upper() + word[1:] for word in tag.split("-") if word)


def GenerateMarkdown(licenseEntry: dict, body: str) -> str:
    """
    Renders a license for Alfred's Text View.
    Parameters
    ----------
    licenseEntry : dict
        The cached license record.
    body : str
        The license text to show, usually already personalized.
    Returns
    -------
    str
        Markdown with the description, rule lists, any placeholders left in
        the body, and the body itself.
    """

    sections = [f"# {licenseEntry.get('name') or licenseEntry.get('key', 'License')}\n"]

    if licenseEntry.get("description"):
        sections.append(f"**Description**\n\n{licenseEntry['description']}\n")

    for field, heading in RULE_SECTIONS:

        if tags := licenseEntry.get(field):
            bullets = "\n".join(f"- {FormatRuleTag(tag)}" for tag in tags)
            sections.append(f"{heading}\n\n{bullets}\n")

    if remaining := FindPlaceholders(body):
        sections.append(
            "**Placeholders to fill**\n\n"
            + "\n".join(f"- `{token}`" for token in remaining)
            + "\n"
        )

    sections.append(f"**License Text**\n\n```\n{body}\n```\n")

    if licenseEntry.get("html_url"):
        sections.append(f"---\n\n[View on ChooseALicense.com]({licenseEntry['html_url']})")

    return "\n".join(sections)


def ErrorMarkdown(message: str) -> str:

    return f"# Error\n\n{message}"
