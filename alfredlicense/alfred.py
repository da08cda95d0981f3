import json

CHOOSEALICENSE_URL: str = "https://choosealicense.com/licenses"

LICENSE_CATEGORIES: dict[str, str] = {
    "AGPL-3.0": "Strongest Copyleft License",
    "GPL-3.0": "Strong Copyleft License",
    "GPL-2.0": "Strong Copyleft License",
    "LGPL-3.0": "Weak Copyleft License",
    "LGPL-2.1": "Weak Copyleft License",
    "MPL-2.0": "Weak Copyleft License",
    "EPL-2.0": "Weak Copyleft License",
    "Apache-2.0": "Permissive License",
    "MIT": "Short and Simple Permissive License",
    "BSD-2-Clause": "Simple Permissive License",
    "BSD-3-Clause": "Permissive License",
    "BSL-1.0": "Permissive License",
    "CC0-1.0": "No Conditions Whatsoever",
    "Unlicense": "No Conditions Whatsoever",
}

# Checked in order, first match wins: (category, key keywords, name keywords).
CATEGORY_KEYWORDS: list[tuple[str, list[str], list[str]]] = [
    ("Strongest Copyleft License", ["agpl"], ["affero"]),
    ("Weak Copyleft License", ["lgpl", "mpl", "epl"], ["lesser", "mozilla"]),
    ("Strong Copyleft License", ["gpl"], []),
    ("No Conditions Whatsoever", ["cc0", "unlicense"], ["public domain"]),
    ("Permissive License", ["mit", "bsd", "apache", "bsl"], ["permissive"]),
]


def CategorizeLicense(spdxId: str | None, name: str | None) -> str:
    """
    Describes how restrictive a license is.
    Parameters
    ----------
    spdxId : str | None
        The SPDX ID (e.g., "GPL-3.0").
    name : str | None
        The full license name.
    Returns
    -------
    str
        A category such as "Weak Copyleft License".
    """

    if spdxId in LICENSE_CATEGORIES:

        return LICENSE_CATEGORIES[spdxId]

    idLower, nameLower = (spdxId or "").lower(), (name or "").lower()

    for category, keyWords, nameWords in CATEGORY_KEYWORDS:

        if any(w in idLower for w in keyWords) or any(w in nameLower for w in nameWords):

            return category

    return "Open Source License"


def FilterLicenses(licenses: list[dict], query: str) -> list[dict]:
    queryLower = query.strip().lower()

    if not queryLower:

        return list(licenses)

    return [
        lic
        for lic in licenses
        if any(
            queryLower in (lic.get(field) or "").lower()
            for field in ["name", "key", "spdx_id"]
        )
    ]


def MakeItems(licenses: list[dict]) -> list[dict]:
    """
    Converts license summaries into Alfred script filter items.
    Parameters
    ----------
    licenses : list[dict]
        Records with "key", "name" and "spdx_id".
    Returns
    -------
    list[dict]
        Items whose arg is the license key. cmd pastes the license, alt
        opens it in the Text View.
    """

    items = []

    for lic in licenses:
        key, name = lic["key"], lic.get("name") or lic["key"]
        spdxId = lic.get("spdx_id") or key
        items.append(
            {
                "uid": key,
                "title": name,
                "subtitle": CategorizeLicense(spdxId, name),
                "arg": key,
                "autocomplete": name,
                "valid": True,
                "match": f"{name} {key} {spdxId}",
                "quicklookurl": f"{CHOOSEALICENSE_URL}/{key}/",
                "mods": {
                    "cmd": {
                        "subtitle": f"Paste {spdxId} on frontmost app",
                        "arg": key,
                    },
                    "alt": {
                        "subtitle": f"View {spdxId} on Text Viewer",
                        "arg": key,
                    },
                },
            }
        )

    return items


def ErrorItem(title: str, subtitle: str) -> dict:

    return {"title": title, "subtitle": subtitle, "valid": False}


def ScriptFilterJson(items: list[dict]) -> str:

    return json.dumps({"items": items}, ensure_ascii=False)
