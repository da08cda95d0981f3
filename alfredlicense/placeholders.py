import re
from pathlib import Path
from typing import NamedTuple

import yaml

from alfredlicense.errors import PlaceholderRulesError

DEFAULT_RULES_PATH: Path = Path(__file__).with_name("placeholder_rules.yml")
TEMPLATE_FIELDS: tuple[str, ...] = ("fullname", "year", "email")

# "[fullname]", "[name of copyright owner]", "<name of author>", "<year>"
PLACEHOLDER_PATTERN = re.compile(r"\[[A-Za-z][A-Za-z ]*\]|<[a-z][a-z ]*>")


class LiteralReplacement(NamedTuple):
    find: str
    replace: str


class PlaceholderRule(NamedTuple):
    """How one license marks its copyright holder, year and email."""

    authorTokens: tuple[str, ...] = ()
    yearTokens: tuple[str, ...] = ()
    emailTokens: tuple[str, ...] = ()
    literals: tuple[LiteralReplacement, ...] = ()


def _TokenList(value: object, where: str) -> tuple[str, ...]:

    if value is None:

        return ()

    if not isinstance(value, list) or not all(
        isinstance(t, str) and t for t in value
    ):
        raise PlaceholderRulesError(f"{where}: expected a list of tokens")

    return tuple(value)


def _ParseLiterals(value: object, where: str) -> tuple[LiteralReplacement, ...]:

    if not isinstance(value, list):
        raise PlaceholderRulesError(f"{where}: literals must be a list")

    literals = []

    for item in value:

        if not (
            isinstance(item, dict)
            and isinstance(item.get("find"), str)
            and item["find"]
            and isinstance(item.get("replace"), str)
        ):
            raise PlaceholderRulesError(f"{where}: each literal needs find/replace")

        try:
            item["replace"].format_map({f: "" for f in TEMPLATE_FIELDS})

        except (KeyError, ValueError, IndexError) as e:
            raise PlaceholderRulesError(f"{where}: bad replace template: {e}") from e
        literals.append(LiteralReplacement(item["find"], item["replace"]))

    return tuple(literals)


def ParsePlaceholderRules(data: object) -> dict[str, PlaceholderRule]:
    """
    Builds the rule table from the parsed YAML document.
    Parameters
    ----------
    data : object
        The document, with "families" and "licenses" mappings.
    Returns
    -------
    dict[str, PlaceholderRule]
        Rules keyed by lowercase license key.
    """

    if not isinstance(data, dict):
        raise PlaceholderRulesError("Rule table must be a mapping")

    familiesData = data.get("families") or {}
    licensesData = data.get("licenses") or {}

    if not isinstance(familiesData, dict) or not isinstance(licensesData, dict):
        raise PlaceholderRulesError("'families' and 'licenses' must be mappings")

    families = {}

    for name, entry in familiesData.items():

        if not isinstance(entry, dict):
            raise PlaceholderRulesError(f"Family '{name}' must be a mapping")
        families[name] = PlaceholderRule(
            authorTokens=_TokenList(entry.get("author"), f"families.{name}.author"),
            yearTokens=_TokenList(entry.get("year"), f"families.{name}.year"),
            emailTokens=_TokenList(entry.get("email"), f"families.{name}.email"),
        )

    rules = {}

    for key, entry in licensesData.items():
        where = f"licenses.{key}"

        if isinstance(entry, str):

            if entry not in families:
                raise PlaceholderRulesError(f"{where}: unknown family '{entry}'")
            rules[str(key).lower()] = families[entry]

        elif isinstance(entry, dict):
            base = PlaceholderRule()

            if family := entry.get("family"):

                if family not in families:
                    raise PlaceholderRulesError(f"{where}: unknown family '{family}'")
                base = families[family]
            rules[str(key).lower()] = base._replace(
                literals=_ParseLiterals(entry.get("literals", []), where)
            )

        else:
            raise PlaceholderRulesError(f"{where}: expected a family name or mapping")

    return rules


def LoadPlaceholderRules(rulesPath: Path | None = None) -> dict[str, PlaceholderRule]:
    """
    Loads the placeholder rule table from YAML.
    Parameters
    ----------
    rulesPath : Path | None, optional
        The YAML file, by default the table shipped with the package.
    Returns
    -------
    dict[str, PlaceholderRule]
        Rules keyed by lowercase license key.
    """

    path = rulesPath or DEFAULT_RULES_PATH

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))

    except OSError as e:
        raise PlaceholderRulesError(f"Cannot read {path}: {e}") from e

    except yaml.YAMLError as e:
        raise PlaceholderRulesError(f"YAML parse {path}: {e}") from e

    return ParsePlaceholderRules(data)


def FindPlaceholders(templateBody: str) -> list[str]:
    """
    Finds the unique placeholder tokens in a license body, in order of first
    appearance (e.g., ["[year]", "[fullname]"]).
    """

    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(templateBody)))


def PersonalizeLicenseBody(
    body: str,
    licenseKey: str,
    rules: dict[str, PlaceholderRule],
    fullname: str | None = None,
    year: str | None = None,
    email: str | None = None,
) -> str:
    """
    Fills a license body with the copyright holder's details.
    Parameters
    ----------
    body : str
        The license text as served by the API.
    licenseKey : str
        The license key (e.g., "mit"); case-insensitive.
    rules : dict[str, PlaceholderRule]
        The rule table from LoadPlaceholderRules().
    fullname, year, email : str | None, optional
        Values to insert. Tokens for a value that is None are left in place.
    Returns
    -------
    str
        The personalized text. Licenses without a rule come back unchanged.
    """

    rule = rules.get(licenseKey.lower())

    if rule is None:

        return body

    values = {"fullname": fullname, "year": year, "email": email}
    filledText = body

    for literal in rule.literals:
        needed = [f for f in TEMPLATE_FIELDS if "{" + f + "}" in literal.replace]

        if all(values[f] is not None for f in needed):
            filledText = filledText.replace(
                literal.find,
                literal.replace.format_map({f: values[f] or "" for f in TEMPLATE_FIELDS}),
            )

    for tokens, value in [
        (rule.authorTokens, fullname),
        (rule.yearTokens, year),
        (rule.emailTokens, email),
    ]:

        if value is None:
            continue

        for token in tokens:
            filledText = filledText.replace(token, str(value))

    return filledText
